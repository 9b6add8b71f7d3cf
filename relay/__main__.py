"""Entrypoint: python -m relay"""
from relay.main import run_relay

if __name__ == "__main__":
    run_relay()
