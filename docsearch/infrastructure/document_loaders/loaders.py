import logging
import zipfile
from pathlib import Path

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from docsearch.core.exceptions import IngestError
from docsearch.core.models.document import DocumentPage

logger = logging.getLogger(__name__)


class PDFLoader:
    """One page per PDF page, numbered from 1; blank pages are skipped."""

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".pdf"

    def load(self, file_path: Path) -> list[DocumentPage]:
        reader = PdfReader(file_path)
        pages = []
        for number, page in enumerate(reader.pages, start=1):
            text = (page.extract_text() or "").strip()
            if text:
                pages.append(DocumentPage(number=number, text=text))
        return pages


class DocxLoader:

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".docx"

    def load(self, file_path: Path) -> list[DocumentPage]:
        doc = Document(file_path)
        paragraphs = [p.text.strip() for p in doc.paragraphs if p.text.strip()]
        if not paragraphs:
            return []
        return [DocumentPage(number=1, text="\n\n".join(paragraphs))]


class TextLoader:

    EXTENSIONS = {".txt", ".md", ".markdown"}

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.EXTENSIONS

    def load(self, file_path: Path) -> list[DocumentPage]:
        text = file_path.read_text(encoding="utf-8").strip()
        return [DocumentPage(number=1, text=text)] if text else []


class CompositeLoader:
    """Dispatch to the first loader that supports the file type."""

    def __init__(self, loaders=None):
        self._loaders = loaders or [
            PDFLoader(),
            DocxLoader(),
            TextLoader(),
        ]

    def supports(self, file_path: Path) -> bool:
        return any(loader.supports(file_path) for loader in self._loaders)

    def load(self, file_path: Path) -> list[DocumentPage]:
        """Load a file into pages.

        Raises:
            IngestError: If the type is unsupported or the file is unreadable.
        """
        for loader in self._loaders:
            if loader.supports(file_path):
                try:
                    return loader.load(file_path)
                except (
                    OSError,
                    UnicodeDecodeError,
                    ValueError,
                    zipfile.BadZipFile,
                    PackageNotFoundError,
                    PdfReadError,
                ) as e:
                    logger.error(f"Failed to load {file_path}: {e}")
                    raise IngestError(
                        f"Failed to load {file_path.name}", {"reason": str(e)}
                    ) from e

        raise IngestError(
            f"Unsupported file type: {file_path.suffix or file_path.name}",
            {"path": str(file_path)},
        )
