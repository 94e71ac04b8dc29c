from .tracing import get_tracer, setup_tracing, tracer

__all__ = ["get_tracer", "setup_tracing", "tracer"]
