import io
import re
import json
import logging
from typing import Dict, List
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

logger = logging.getLogger(__name__)

HIGHLIGHT_PREFIXES = {
    '<b>Crucial Takeaway:</b>': 'CrucialTakeawayStyle',
    '<b>Key Insight:</b>': 'KeyInsightStyle',
    '<b>Important Note:</b>': 'ImportantNoteStyle',
}


def _header_footer(canvas_obj, doc):
    canvas_obj.saveState()
    canvas_obj.setFont('Helvetica', 9)
    canvas_obj.drawString(doc.rightMargin, 0.75 * inch, f"Page {doc.page}")
    canvas_obj.restoreState()


def _report_styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name='TitleStyle', fontSize=24, leading=28, alignment=TA_CENTER, spaceAfter=20, fontName='Helvetica-Bold'))
    styles.add(ParagraphStyle(name='SubHeadingStyle', fontSize=18, leading=22, spaceBefore=20, spaceAfter=10, alignment=TA_CENTER, fontName='Helvetica-Bold'))
    styles.add(ParagraphStyle(name='SectionHeadingStyle', fontSize=14, leading=18, spaceBefore=15, spaceAfter=8, fontName='Helvetica-Bold'))
    styles.add(ParagraphStyle(name='SubSectionHeadingStyle', fontSize=12, leading=16, spaceBefore=10, spaceAfter=4, fontName='Helvetica-Bold'))
    styles.add(ParagraphStyle(name='BoldBodyText', fontSize=10, leading=14, spaceAfter=6, fontName='Helvetica-Bold'))
    styles.add(ParagraphStyle(name='NormalBodyText', fontSize=10, leading=14, spaceAfter=6, fontName='Helvetica', alignment=TA_JUSTIFY))
    styles.add(ParagraphStyle(name='BulletStyle', fontSize=10, leading=14, leftIndent=36, bulletIndent=18, spaceAfter=3, fontName='Helvetica'))
    styles.add(ParagraphStyle(name='ItalicBodyText', fontSize=10, leading=14, spaceAfter=6, fontName='Helvetica-Oblique', alignment=TA_JUSTIFY))
    styles.add(ParagraphStyle(name='KeyInsightStyle', parent=styles['NormalBodyText'], fontName='Helvetica-Bold',
                              backColor=HexColor('#FFF8E1'), borderPadding=4, borderWidth=0.5, borderColor=HexColor('#FFD700')))
    styles.add(ParagraphStyle(name='CrucialTakeawayStyle', parent=styles['NormalBodyText'], fontName='Helvetica-Bold',
                              backColor=HexColor('#FCE4EC'), borderPadding=4, borderWidth=0.5, borderColor=HexColor('#FFAB91')))
    styles.add(ParagraphStyle(name='ImportantNoteStyle', parent=styles['NormalBodyText'], fontName='Helvetica-Oblique',
                              backColor=HexColor('#E0FFFF'), borderPadding=4, borderWidth=0.5, borderColor=HexColor('#AFEEEE')))
    return styles


def _inline_markdown(text: str) -> str:
    text = re.sub(r'\*\*(.*?)\*\*', r'<b>\1</b>', text)
    return re.sub(r'\*(.*?)\*', r'<i>\1</i>', text)


def markdown_to_flowables(markdown_text: str, styles) -> List:
    """Maps the report's Markdown subset (headers, bullets, highlight prefixes) onto ReportLab paragraphs."""
    story = []
    for line in markdown_text.split('\n'):
        line = line.strip()
        if not line:
            story.append(Spacer(1, 0.1 * inch))
            continue

        prefix = next((p for p in HIGHLIGHT_PREFIXES if line.startswith(p)), None)
        if prefix:
            story.append(Paragraph(line, styles[HIGHLIGHT_PREFIXES[prefix]]))
        elif line.startswith('### '):
            story.append(Paragraph(_inline_markdown(line[4:]), styles['SubSectionHeadingStyle']))
        elif line.startswith('## ') or line.startswith('# '):
            story.append(Paragraph(_inline_markdown(line.lstrip('#').strip()), styles['SectionHeadingStyle']))
        elif line.startswith('* ') or line.startswith('- '):
            story.append(Paragraph(_inline_markdown(line[2:]), styles['BulletStyle'], bulletText='•'))
        else:
            story.append(Paragraph(_inline_markdown(line), styles['NormalBodyText']))
    return story


def create_numerology_pdf(report_data: Dict) -> bytes:
    """
    Generates a PDF numerology report using ReportLab: title page, the model's
    report body, the confirmed names and the raw core numbers.
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter,
                            rightMargin=inch, leftMargin=inch,
                            topMargin=inch, bottomMargin=inch)
    styles = _report_styles()

    profile_details = report_data.get('profile_details', {})
    confirmed_suggestions = report_data.get('confirmed_suggestions', [])

    story = [
        Paragraph("Your Personalized Numerology Report", styles['TitleStyle']),
        Spacer(1, 0.2 * inch),
        Paragraph(f"For: <b>{escape(str(report_data.get('full_name', 'Client Name')))}</b>", styles['SubHeadingStyle']),
        Paragraph(f"Birth Date: <b>{escape(str(report_data.get('birth_date', 'N/A')))}</b>", styles['SubSectionHeadingStyle']),
    ]
    for key, label in (('birth_time', 'Birth Time'), ('birth_place', 'Birth Place')):
        if profile_details.get(key):
            story.append(Paragraph(f"<b>{label}:</b> {escape(str(profile_details[key]))}", styles['SubSectionHeadingStyle']))
    story.append(Spacer(1, 0.5 * inch))
    story.append(Paragraph("A Comprehensive Guide to Your Energetic Blueprint and Name Optimization", styles['ItalicBodyText']))
    story.append(PageBreak())

    story.extend(markdown_to_flowables(report_data.get('intro_response') or 'No report content available.', styles))
    story.append(PageBreak())

    if confirmed_suggestions:
        story.append(Paragraph("Confirmed Name Corrections", styles['SubHeadingStyle']))
        for suggestion in confirmed_suggestions:
            story.append(Paragraph(f"<b>Name:</b> {escape(str(suggestion.get('name', 'N/A')))}", styles['BoldBodyText']))
            story.append(Paragraph(f"<b>Expression Number:</b> {suggestion.get('expression_number', 'N/A')}", styles['NormalBodyText']))
            story.append(Paragraph(f"<b>Rationale:</b> {escape(str(suggestion.get('rationale') or 'No rationale provided.'))}", styles['NormalBodyText']))
            story.append(Spacer(1, 0.2 * inch))
        story.append(PageBreak())

    story.append(Paragraph("Core Numerological Blueprint (Raw Data)", styles['SubHeadingStyle']))
    for key, label in (
        ('expression_number', 'Expression Number'),
        ('life_path_number', 'Life Path Number'),
        ('birth_day_number', 'Birth Day Number'),
        ('soul_urge_number', 'Soul Urge Number'),
        ('personality_number', 'Personality Number'),
    ):
        story.append(Paragraph(f"<b>{label}:</b> {profile_details.get(key, 'N/A')}", styles['NormalBodyText']))

    lo_shu = profile_details.get('lo_shu_grid')
    if lo_shu:
        story.append(Paragraph("Lo Shu Grid Analysis (Raw Data)", styles['SectionHeadingStyle']))
        story.append(Paragraph(f"<b>Digit Counts:</b> {json.dumps(lo_shu.get('grid_counts', {}))}", styles['NormalBodyText']))
        missing = ', '.join(map(str, lo_shu.get('missing_numbers', []))) or 'None'
        story.append(Paragraph(f"<b>Missing Numbers:</b> {missing}", styles['NormalBodyText']))
        for lesson in lo_shu.get('missing_lessons', []):
            story.append(Paragraph(f"{lesson['number']}: {lesson['impact']}", styles['BulletStyle'], bulletText='•'))

    doc.build(story, onFirstPage=_header_footer, onLaterPages=_header_footer)
    pdf_bytes = buffer.getvalue()
    logger.info(f"Generated PDF bytes size: {len(pdf_bytes)} bytes")
    return pdf_bytes
