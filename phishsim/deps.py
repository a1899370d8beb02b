# phishsim/deps.py
# FastAPI dependencies for the management service. Tests swap these out via
# app.dependency_overrides.

from functools import lru_cache

from phishsim.channel import SimulationClient, client_from_settings
from phishsim.templates import TemplateCatalog, default_catalog


def get_catalog() -> TemplateCatalog:
    return default_catalog


@lru_cache
def get_simulation_client() -> SimulationClient:
    return client_from_settings()
