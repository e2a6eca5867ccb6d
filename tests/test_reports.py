"""
Tests for PDF report rendering.
"""

from name_corrector.profile import get_comprehensive_numerology_profile
from name_corrector.reports import _report_styles, create_numerology_pdf, markdown_to_flowables


def test_markdown_styles():
    styles = _report_styles()
    flowables = markdown_to_flowables(
        "## Core Blueprint\n\n### Life Path\n* **Bold** point\n<b>Key Insight:</b> Balance.\nPlain *text*.",
        styles,
    )
    style_names = [getattr(f, "style", None) and f.style.name for f in flowables]

    assert style_names == [
        "SectionHeadingStyle",
        None,
        "SubSectionHeadingStyle",
        "BulletStyle",
        "KeyInsightStyle",
        "NormalBodyText",
    ]


def test_pdf_report():
    profile = get_comprehensive_numerology_profile("John Doe", "1990-05-15", birth_place="Pune & Mumbai")
    pdf = create_numerology_pdf({
        "full_name": "John <Doe>",
        "birth_date": "1990-05-15",
        "profile_details": profile,
        "intro_response": "## Executive Summary\nYour **Expression 7** seeks depth.",
        "confirmed_suggestions": [
            {"name": "Edna & Doe", "expression_number": 4, "rationale": "Grounding <energy>."},
        ],
    })

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_pdf_without_report_body():
    pdf = create_numerology_pdf({"full_name": "John Doe", "birth_date": "1990-05-15"})
    assert pdf.startswith(b"%PDF")
