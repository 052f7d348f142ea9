"""
Plinth CLI.

Usage:
    plinth inspect myapp.main:AppModule
    plinth inspect myapp.main:AppModule --json
    plinth providers myapp.main:AppModule
"""

__version__ = "0.3.0"
__cli_name__ = "plinth"


def main():
    """Wrapper to avoid eager import of __main__ which causes warnings with -m."""
    from .__main__ import main as _main
    return _main()
