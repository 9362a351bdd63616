"""Document loader implementations."""
from .loaders import CompositeLoader, DocxLoader, PDFLoader, TextLoader

__all__ = ["PDFLoader", "DocxLoader", "TextLoader", "CompositeLoader"]
