"""Built-in CLI sub-commands for tasc.

Each module exports a plain callback registered directly on the root app:

* :mod:`~tasc.commands.init` -- create ``tasc.json``.
* :mod:`~tasc.commands.config` -- show the effective configuration.
* :mod:`~tasc.commands.generate` -- run the generation pipeline once.
* :mod:`~tasc.commands.watch` -- poll and regenerate on changes.
* :mod:`~tasc.commands.operations` -- list extracted operations.
"""
