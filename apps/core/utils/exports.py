import csv
from io import BytesIO, StringIO


def rows_to_csv_text(headers, rows):
    output = StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return output.getvalue()


def image_to_pdf_bytes(images):
    if not images:
        return b''
    rgb_images = [img.convert('RGB') for img in images]
    output = BytesIO()
    rgb_images[0].save(output, format='PDF', save_all=True, append_images=rgb_images[1:])
    return output.getvalue()


def format_amount(value):
    """Render 50.0 as 50 and 12.5 as 12.5."""
    number = float(value)
    return str(int(number)) if number.is_integer() else str(number)
