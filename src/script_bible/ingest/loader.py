"""Load manuscripts from various formats."""

from pathlib import Path

from bs4 import BeautifulSoup


def load_manuscript(path: Path) -> str:
    """
    Load a manuscript from file and return plain text.

    Supports:
    - .txt / .md files (read directly)
    - .epub files (extract text from HTML)
    """
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md"):
        return load_txt(path)
    elif suffix == ".epub":
        return load_epub(path)
    else:
        raise ValueError(f"Unsupported file format: {suffix}")


def load_txt(path: Path) -> str:
    """Load a plain text file.

    utf-8-sig also reads BOM-less UTF-8 and drops the BOM Windows editors
    write. Chinese manuscripts that are not UTF-8 are usually GB-encoded.
    """
    for encoding in ["utf-8-sig", "gb18030"]:
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue

    raise ValueError(f"Could not decode {path} with any common encoding")


def load_epub(path: Path) -> str:
    """Load an EPUB file and extract text."""
    import ebooklib
    from ebooklib import epub

    book = epub.read_epub(str(path))
    texts: list[str] = []

    for item in book.get_items():
        if item.get_type() == ebooklib.ITEM_DOCUMENT:
            soup = BeautifulSoup(item.get_content(), "html.parser")

            for element in soup(["script", "style"]):
                element.decompose()

            text = soup.get_text(separator="\n")

            # One manuscript line per non-empty HTML text line
            lines = [line.strip() for line in text.splitlines()]
            text = "\n".join(line for line in lines if line)

            if text:
                texts.append(text)

    return "\n\n".join(texts)
