from .brotli import BrotliCompression

__all__ = [
	"BrotliCompression",
]
