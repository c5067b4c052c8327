"""Token compilation engine (sources -> rendered artifacts)."""

from tokenctl.infrastructure.compiler.engine import CompilerEngine, TokenCompiler

__all__ = ["CompilerEngine", "TokenCompiler"]
