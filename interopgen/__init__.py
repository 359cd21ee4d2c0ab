from interopgen.generator import GenerationResult, GeneratorConfig, generate, scan

__version__ = "0.1.0"


__all__ = [
    "GenerationResult",
    "GeneratorConfig",
    "generate",
    "scan",
]
