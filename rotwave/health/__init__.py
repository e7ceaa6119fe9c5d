from rotwave.health.router import router


__all__ = ["router"]
