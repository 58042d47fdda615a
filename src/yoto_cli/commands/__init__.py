"""
Command functions behind the ``yoto`` CLI.

Every command takes the DI container first, prints its own output and
returns a ``Result``. Only ``yoto_cli.cli`` decides the exit status.
"""
