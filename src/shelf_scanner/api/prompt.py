"""
Prompts sent to the models.
"""

SHELF_PROMPT_TEMPLATE = """
Please look at these images of a bookshelf. I will provide the image filename before each image part.
Extract a list of all the visible books.

OUTPUT (STRICT JSON ONLY)
Return a single JSON array. Each element is an object with exactly these keys:
{
  "title": "<book title as printed on the spine or cover>",
  "author": "<author name, or empty string if not visible>",
  "sources": ["<filename of an image where this book was detected>", ...]
}
Rules:
- "sources" must be an array of strings, using the filenames exactly as given.
- Combine duplicates: if a book is found in multiple images, create one object for it
  and list all corresponding image filenames in "sources".
- Do not return markdown formatting or code fences, just the raw JSON array.
""".strip()

IMAGE_LABEL_TEMPLATE = "Image Filename: {filename}"


ENRICHMENT_PROMPT_TEMPLATE = """
Find bibliographic details for this book.
Title: {title}
Author: {author}

Return a single JSON object with these keys:
{{
  "authors": "<all authors, comma separated>",
  "isbn": "<ISBN-13 if known, else ISBN-10, else empty>",
  "publisher": "<publisher>",
  "publicationDate": "<year or full date of publication>",
  "edition": "<edition, or empty if unknown>"
}}
Return JSON only. No extra text or markdown.
""".strip()
