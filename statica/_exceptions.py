__all__ = ("StaticaError", "ConfigurationError")


class StaticaError(Exception): ...


class ConfigurationError(StaticaError): ...
