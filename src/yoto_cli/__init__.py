"""
Yoto CLI - manage Yoto MYO playlists from the command line.

The ``yoto_cli.api`` package is the HTTP client; ``yoto_cli.services`` holds
the upload, transcode and card editing workflow built on top of it.
"""
