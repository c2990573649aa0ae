from __future__ import annotations

import base64
import binascii
from io import BytesIO
from typing import Iterable

from PIL import Image, ImageDraw, ImageOps

from apps.core.records import SchoolSettings, Student
from apps.core.utils.exports import image_to_pdf_bytes

HEADER_COLOR = (16, 185, 129)


def decode_photo(photo: str):
    """Open a ``data:image/...;base64,`` photo, or return None when it cannot be read."""
    if not photo or ',' not in photo:
        return None
    _, encoded = photo.split(',', 1)
    try:
        return Image.open(BytesIO(base64.b64decode(encoded))).convert('RGB')
    except (binascii.Error, OSError, ValueError):
        return None


def _draw_photo_box(card, draw, student: Student, box):
    photo = decode_photo(student.photo)
    left, top, right, bottom = box
    if photo is not None:
        card.paste(ImageOps.fit(photo, (right - left, bottom - top)), (left, top))
        return
    draw.rectangle(box, outline='black')
    draw.text((left + 50, top + 120), 'PHOTO', fill='black')


def build_student_id_card_image(student: Student, school: SchoolSettings):
    card = Image.new('RGB', (1000, 600), color='white')
    draw = ImageDraw.Draw(card)
    draw.rectangle((0, 0, 1000, 90), fill=HEADER_COLOR)
    draw.text((24, 30), school.name, fill='white')

    lines = [
        f"Name: {student.full_name}",
        f"Grade: {student.grade.value}",
        f"Parent: {student.parent_name}",
        f"Phone: {student.phone}",
        f"Student ID: {student.id}",
        f"Parent Access Code: {student.parent_access_code or 'N/A'}",
    ]
    y = 112
    for line in lines:
        draw.text((24, y), line, fill='black')
        y += 48

    _draw_photo_box(card, draw, student, (740, 130, 960, 390))
    draw.text((24, 560), school.address, fill='black')
    return card


def generate_id_card_pdf(student: Student, school: SchoolSettings) -> bytes:
    return image_to_pdf_bytes([build_student_id_card_image(student, school)])


def generate_bulk_id_cards_pdf(students: Iterable[Student], school: SchoolSettings) -> bytes:
    return image_to_pdf_bytes([build_student_id_card_image(student, school) for student in students])
