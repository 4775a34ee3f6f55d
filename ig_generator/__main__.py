"""Run the IG image generator with ``python -m ig_generator``."""

from ig_generator.api.main import run_server

if __name__ == "__main__":
    run_server()
