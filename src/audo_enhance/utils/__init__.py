from .config import ServiceConfig, load_service_config, load_service_config_file, service_config_from_env

__all__ = [
    "ServiceConfig",
    "load_service_config",
    "load_service_config_file",
    "service_config_from_env",
]
