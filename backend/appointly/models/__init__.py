from .generated import Base

__all__ = ["Base"]
