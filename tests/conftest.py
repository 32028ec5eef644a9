import sys
from pathlib import Path
from typing import List

import pytest

# Repo root = one level above tests/
REPO_ROOT = Path(__file__).resolve().parents[1]

# Ensure repo root is on sys.path so `import cli`, `lexical_rag` and `llm` resolve.
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def write_pdf(path: Path, pages: List[str]) -> Path:
    """Write a minimal text PDF, one Helvetica line per page."""
    objs = [b"<< /Type /Catalog /Pages 2 0 R >>"]
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(len(pages)))
    objs.append(f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode())
    objs.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")
    for i, text in enumerate(pages):
        stream = f"BT /F1 12 Tf 72 720 Td ({_pdf_escape(text)}) Tj ET".encode("latin-1")
        objs.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
            ).encode()
        )
        objs.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for n, body in enumerate(objs, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % n + body + b"\nendobj\n"
    xref = len(out)
    out += b"xref\n0 %d\n" % (len(objs) + 1)
    out += b"0000000000 65535 f \n"
    for off in offsets:
        out += b"%010d 00000 n \n" % off
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objs) + 1, xref)
    path.write_bytes(bytes(out))
    return path


@pytest.fixture
def make_pdf(tmp_path: Path):
    def _make(pages: List[str], name: str = "doc.pdf") -> Path:
        return write_pdf(tmp_path / name, pages)

    return _make


@pytest.fixture
def make_docx(tmp_path: Path):
    import docx

    def _make(paragraphs: List[str], name: str = "doc.docx", table=None) -> Path:
        d = docx.Document()
        for p in paragraphs:
            d.add_paragraph(p)
        if table:
            t = d.add_table(rows=len(table), cols=len(table[0]))
            for r, row in enumerate(table):
                for c, value in enumerate(row):
                    t.cell(r, c).text = value
        path = tmp_path / name
        d.save(str(path))
        return path

    return _make


@pytest.fixture
def make_pptx(tmp_path: Path):
    from pptx import Presentation
    from pptx.util import Inches

    def _make(slides: List[str], name: str = "deck.pptx", notes: str = "") -> Path:
        prs = Presentation()
        blank = prs.slide_layouts[6]
        for i, text in enumerate(slides):
            slide = prs.slides.add_slide(blank)
            box = slide.shapes.add_textbox(Inches(1), Inches(1), Inches(6), Inches(2))
            box.text_frame.text = text
            if notes and i == 0:
                slide.notes_slide.notes_text_frame.text = notes
        path = tmp_path / name
        prs.save(str(path))
        return path

    return _make
