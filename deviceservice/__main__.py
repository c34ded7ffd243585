"""
Entry point for running deviceservice as a module: python -m deviceservice
"""

from deviceservice.cli.commands import app

if __name__ == "__main__":
    app()
