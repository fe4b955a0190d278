"""Built-in CLI commands for storyblok-cdn.

Each module in this package defines one or more Typer commands or command
groups that are registered on the root application in
:mod:`storyblok_cdn.app`:

* :mod:`~storyblok_cdn.commands.fetch` -- ``story``, ``stories`` and
  ``cache-version``.
* :mod:`~storyblok_cdn.commands.config` -- ``config show``, ``config set``
  and ``config reset``.
"""
