"""Built-in CLI commands.

* :mod:`~envauth.commands.apply` -- ``envauth apply``.
* :mod:`~envauth.commands.inspect` -- ``envauth hosts``, ``vars`` and ``headers``.
"""
