from .memory import Memory
