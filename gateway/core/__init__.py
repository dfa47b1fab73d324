"""Core configuration and app wiring (config, lifespan, exception handlers, limiter).

Import from submodules: gateway.core.config, gateway.core.lifespan,
gateway.core.exception_handlers, gateway.core.limiter.
"""
