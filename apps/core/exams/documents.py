from __future__ import annotations

from PIL import Image, ImageDraw

from apps.core.records import SchoolSettings
from apps.core.utils.exports import format_amount, image_to_pdf_bytes


def build_report_card_image(profile, school: SchoolSettings):
    """Render a one-page report card from a ``StudentProfile``."""
    width, height = 1240, 1754
    page = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(page)
    student = profile.student

    draw.rectangle((40, 40, width - 40, height - 40), outline='black', width=3)
    draw.text((90, 90), school.name, fill='black')
    draw.text((90, 130), school.address, fill='black')
    draw.text((90, 190), 'STUDENT REPORT CARD', fill='black')

    y = 260
    for line in (
        f"Student Name: {student.full_name}",
        f"Grade: {student.grade.value}",
        f"Parent: {student.parent_name}",
        f"Attendance Rate: {profile.attendance_rate}%",
        f"Average Score: {profile.avg_score}",
    ):
        draw.text((90, y), line, fill='black')
        y += 44

    y += 30
    draw.text((90, y), 'Subject', fill='black')
    draw.text((500, y), 'Term', fill='black')
    draw.text((750, y), 'Date', fill='black')
    draw.text((1000, y), 'Score', fill='black')
    draw.line((90, y + 26, width - 90, y + 26), fill='black')
    y += 50

    for result in profile.grades:
        if y > height - 200:
            break
        draw.text((90, y), result.subject, fill='black')
        draw.text((500, y), result.term.value, fill='black')
        draw.text((750, y), result.date, fill='black')
        draw.text((1000, y), f"{format_amount(result.score)}/{format_amount(result.max_score)}", fill='black')
        y += 36

    draw.text((90, height - 150), 'Parent Signature', fill='black')
    draw.text((900, height - 150), 'Principal', fill='black')
    return page


def generate_report_card_pdf(profile, school: SchoolSettings) -> bytes:
    return image_to_pdf_bytes([build_report_card_image(profile, school)])
