"""Application layer: DTOs, interfaces (ports) and workflow functions.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, notifier, engine).
"""
