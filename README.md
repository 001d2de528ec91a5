# pdfcraft

Low-level building blocks for producing PDF files from Python.

pdfcraft holds the objects a PDF writer is made of. Each object writes its
own dictionary (and stream, where it has one) as bytes to a binary file-like
object.

## What is in it

- **TrueType fonts**
  - `pdfcraft.ttfparser.TTFParser` reads the tables a PDF needs: `head`,
    `hhea`, `maxp`, `hmtx`, `cmap` (format 4 from the Windows Unicode
    subtable, plus format 12 when present), `name`, `OS/2`, `post`, `loca`
    and, when `use_kerning` is set, `kern`. Malformed or unsupported fonts
    raise `TTFError`; a missing table raises `TableNotFoundError`.
  - `pdfcraft.subset_font.SubsetFont` maps text to glyphs (`add_chars`,
    `char_index`, `char_width`, `char_code_to_glyph_index`), substitutes
    characters the font lacks through `TtfOption.on_glyph_not_found_substitute`
    (a space by default), gives kerning values and scaled metrics, and writes
    the Type0 font dictionary.
  - `pdfcraft.font_file.FontFileDictionary` builds (`make_font`) and writes
    the compressed FontFile2 stream holding only the glyphs in use, composite
    glyph components included.
  - `pdfcraft.font_descriptor.SubfontDescriptor` and
    `pdfcraft.unicode_map.UnicodeMap` write the matching font descriptor and
    ToUnicode CMap.
  - `pdfcraft.ttf_info.TtfInfo` is a dictionary of font facts with typed
    getters that raise `KeyNotFoundError` or `WrongTypeError`.
- **Images**
  - `pdfcraft.image_parse.parse_img` / `parse_img_path` read JPEG (RGB, gray,
    CMYK) and PNG (gray, RGB, palette; 8 bits per channel or less, not
    interlaced). PNG alpha channels are split off into a separate soft mask.
    Problems raise `ImageParseError`.
  - `pdfcraft.image_obj.ImageObj` and `pdfcraft.smask.SMask` write images and
    soft masks as image XObjects; `pdfcraft.image_holder` pairs image bytes
    with an identifier (an MD5 digest or the file path).
- **Encryption** – `pdfcraft.pdf_protection.PDFProtection` computes the
  standard RC4 40-bit O, U and P values and per-object keys;
  `pdfcraft.pdf_protection.rc4` encrypts a byte string.
- **Document structure** – `pdfcraft.page_objects` (`PageObj` with link
  annotations, `PagesObj`, `ProcSetObj`), `pdfcraft.outlines` (bookmarks),
  `pdfcraft.transparency` (alpha and blend modes, paint styles) and
  `pdfcraft.pdf_types` (rectangles, margins, page options, page sizes in
  points such as `PAGE_SIZE_A4`, links, document info).

## Installation

```
pip install .
```

## Examples

Measure and subset text with a TrueType font:

```python
from pdfcraft.subset_font import SubsetFont, TtfOption

font = SubsetFont()
font.set_ttf_font_option(TtfOption(use_kerning=True))
font.set_ttf_by_path("DejaVuSans.ttf")
text = font.add_chars("Hello")
widths = [font.char_width(ch) for ch in text]
```

Read an image and write it as an XObject:

```python
import io
from pdfcraft.image_parse import parse_img_path
from pdfcraft.image_obj import ImageObj

info = parse_img_path("picture.png")
print(info.w, info.h, info.colspace)

image = ImageObj()
image.set_image_path("picture.png")
image.parse()
out = io.BytesIO()
image.write(out, obj_id=5)
```

Protect a document (an empty owner password is replaced by a random one):

```python
from pdfcraft.pdf_protection import PDFProtection, Permissions

protection = PDFProtection()
protection.set_protection(Permissions.PRINT | Permissions.COPY, b"password", b"")
key = protection.object_key(4)
```

Transparency states are shared through a map keyed on alpha and blend mode:

```python
from pdfcraft.transparency import TransparencyMap, new_transparency

states = TransparencyMap()
half = states.save(new_transparency(0.5, "/Multiply"))
assert states.find(half) is half
```

Outline items are registered through a callable that adds an object to the
document and returns its zero-based position:

```python
from pdfcraft.outlines import OutlinesObj

objects = []

def add_obj(obj):
    objects.append(obj)
    return len(objects) - 1

outlines = OutlinesObj(add_obj, index=3)
outlines.add_outline_with_position(dest=4, title="Chapter 1", y=700.0)
```

## What it does not do

pdfcraft has no document class that assembles these objects into a complete
file: it does not number objects, write the cross-reference table or trailer,
draw text or shapes into page content streams, or import pages from existing
PDFs. Those steps are left to the code that uses these objects. It has no
command-line tool.

## Running the tests

```
pip install ".[test]"
pytest
```