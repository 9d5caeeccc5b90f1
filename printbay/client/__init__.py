from printbay.client.api_service import ApiService
from printbay.client.file_cache import FileCache
from printbay.client.simulation import SimulationService

__all__ = ["ApiService", "FileCache", "SimulationService"]
