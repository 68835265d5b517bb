"""Tests for PDF assembly and report filenames."""
from datetime import date
from io import BytesIO

import pytest
from PIL import Image
from pypdf import PdfReader
from reportlab.lib.units import mm

from models import VehicleRecord
from reporting.assembler import DirectorySink, assemble_pdf, report_filename
from reporting.paginator import paginate_surface
from reporting.surface import RasterSurface


def _surface(width: int, height: int) -> RasterSurface:
    buf = BytesIO()
    Image.new("RGB", (width, height), (250, 250, 250)).save(buf, format="PNG")
    return RasterSurface.from_png(buf.getvalue())


def _vehicle(brand: str = "Toyota", model: str = "Corolla", year: int = 2020) -> VehicleRecord:
    return VehicleRecord(brand=brand, model=model, year=year, reference_price="R$ 80.000,00")


# --- filename ---
def test_report_filename_pattern():
    name = report_filename(_vehicle(), date(2026, 10, 17))
    assert name == "Laudo_ReviuCar_Toyota_Corolla_2020_17-10-2026.pdf"


def test_report_filename_collapses_whitespace():
    name = report_filename(_vehicle("Land  Rover", "Range Rover\tEvoque"), date(2026, 1, 5))
    assert name == "Laudo_ReviuCar_Land_Rover_Range_Rover_Evoque_2020_05-01-2026.pdf"


def test_report_filename_custom_prefix_and_extension():
    name = report_filename(_vehicle(), date(2026, 10, 17), prefix="Report", extension="")
    assert name == "Report_Toyota_Corolla_2020_17-10-2026"


# --- PDF ---
def test_assemble_pdf_single_page():
    pages = paginate_surface(_surface(100, 120))
    pdf = assemble_pdf(pages, title="Inspection")
    reader = PdfReader(BytesIO(pdf))
    assert len(reader.pages) == 1
    box = reader.pages[0].mediabox
    assert float(box.width) == pytest.approx(595.27, abs=0.1)
    assert float(box.height) == pytest.approx(841.89, abs=0.1)


def test_assemble_pdf_one_pdf_page_per_placement():
    pages = paginate_surface(_surface(100, 300))
    assert len(pages) == 3
    pdf = assemble_pdf(pages)
    assert pdf.startswith(b"%PDF")
    assert len(PdfReader(BytesIO(pdf)).pages) == 3


def _image_matrices(pdf: bytes) -> list[list[float]]:
    """cm operands in force at each page's image Do, one per page."""
    matrices = []
    for page in PdfReader(BytesIO(pdf)).pages:
        current = None
        for operands, operator in page.get_contents().operations:
            if operator == b"cm":
                current = [float(v) for v in operands]
            elif operator == b"Do":
                matrices.append(current)
    return matrices


def test_assemble_pdf_draws_each_page_at_its_offset():
    pages = paginate_surface(_surface(100, 300))
    page_h = 297 * mm
    draw_h = pages[0].draw_height * mm
    matrices = _image_matrices(assemble_pdf(pages))

    assert len(matrices) == 3
    for i, (width, _b, _c, height, x, y) in enumerate(matrices):
        assert width == pytest.approx(210 * mm, abs=0.05)
        assert height == pytest.approx(draw_h, abs=0.05)
        assert x == pytest.approx(0, abs=0.05)
        assert y == pytest.approx(page_h - draw_h + i * page_h, abs=0.05)
    assert len({round(m[5], 1) for m in matrices}) == 3


def test_assemble_pdf_requires_pages():
    with pytest.raises(ValueError):
        assemble_pdf([])


# --- sink ---
def test_directory_sink_writes_file(tmp_path):
    sink = DirectorySink(tmp_path / "out")
    path = sink.save(b"%PDF-1.4 test", "Laudo_ReviuCar_Toyota_Corolla_2020_17-10-2026.pdf")
    assert path.parent == tmp_path / "out"
    assert path.read_bytes() == b"%PDF-1.4 test"


def test_directory_sink_strips_directories_from_filename(tmp_path):
    path = DirectorySink(tmp_path).save(b"x", "../escape.pdf")
    assert path == tmp_path / "escape.pdf"
