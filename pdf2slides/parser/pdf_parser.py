"""
PDF Parser - Opens PDF documents and exposes pages to the extraction pipeline

Content streams are interpreted with pdfminer.six, which records the page's
drawing operations and text-content items in one pass. Rasters come from
PyMuPDF (fitz).
"""

import io
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import fitz  # PyMuPDF
import numpy as np
from pdfminer.pdfdevice import PDFDevice
from pdfminer.pdfdocument import PDFDocument
from pdfminer.pdffont import PDFUnicodeNotDefined
from pdfminer.pdfinterp import PDFPageInterpreter, PDFResourceManager
from pdfminer.pdfpage import PDFPage
from pdfminer.pdfparser import PDFParser as MinerParser
from pdfminer.pdftypes import list_value, stream_value
from pdfminer.psparser import LIT, PSLiteral, literal_name
from pdfminer.utils import mult_matrix, translate_matrix

from .models import FontInfo, PageRaster, TextItem
from .operators import OPS, OperatorList
from ..exceptions import DocumentOpenError

logger = logging.getLogger(__name__)

LITERAL_FORM = LIT('Form')
LITERAL_IMAGE = LIT('Image')

# FontDescriptor flag bit 7
ITALIC_FLAG = 64


def cmyk_to_rgb(c: float, m: float, y: float, k: float) -> List[float]:
    """Naive CMYK to RGB conversion, components in [0, 1]."""
    return [(1 - c) * (1 - k), (1 - m) * (1 - k), (1 - y) * (1 - k)]


def _font_info(font) -> FontInfo:
    name = getattr(font, 'basefont', None) or getattr(font, 'fontname', None) or ''
    if isinstance(name, PSLiteral):
        name = literal_name(name)
    elif isinstance(name, bytes):
        name = name.decode('latin-1', errors='ignore')
    flags = getattr(font, 'flags', 0) or 0
    return FontInfo(str(name), italic=bool(flags & ITALIC_FLAG))


class RecordingDevice(PDFDevice):
    """
    pdfminer device that collects text-content items and the operator list.

    Text is emitted one item per string segment of a show operation, with the
    segment's text rendering matrix and advance width in page space.
    """

    def __init__(self, rsrcmgr: PDFResourceManager):
        super().__init__(rsrcmgr)
        self.operators = OperatorList()
        self.text_items: List[TextItem] = []
        self.fonts: Dict[str, FontInfo] = {}
        self.font_names: Dict[int, str] = {}

    def begin_page(self, page, ctm):
        self.operators.add(OPS.TRANSFORM, list(ctm))

    def register_font(self, name: str, font):
        """Remember the resource name a font object was selected under."""
        if font is None:
            return
        self.font_names[id(font)] = name
        if name not in self.fonts:
            self.fonts[name] = _font_info(font)

    def render_string(self, textstate, seq, ncs, graphicstate) -> List[Any]:
        """
        Lay out one show operation.

        Mirrors pdfminer's horizontal string layout and advances the text
        line matrix the same way.

        Returns:
            Decoded segments: strings for shown text, numbers for kerning
        """
        font = textstate.font
        matrix = mult_matrix(textstate.matrix, self.ctm)
        fontsize = textstate.fontsize
        scaling = textstate.scaling * 0.01
        charspace = textstate.charspace * scaling
        wordspace = 0 if font.is_multibyte() else textstate.wordspace * scaling
        rise = textstate.rise
        dxscale = 0.001 * fontsize * scaling
        font_name = self.font_names.get(id(font), '')
        unit_scale = math.hypot(matrix[0], matrix[1])

        if font.is_vertical():
            logger.debug(f"Vertical font '{font_name}' laid out horizontally")

        (x, y) = textstate.linematrix
        needcharspace = False
        segments = []

        for obj in seq:
            if isinstance(obj, (int, float)):
                x -= obj * dxscale
                needcharspace = True
                segments.append(obj)
                continue

            chars = []
            origin = None
            for cid in font.decode(obj):
                if needcharspace:
                    x += charspace
                if origin is None:
                    origin = x
                try:
                    chars.append(font.to_unichr(cid))
                except PDFUnicodeNotDefined:
                    pass
                x += font.char_width(cid) * fontsize * scaling
                if cid == 32 and wordspace:
                    x += wordspace
                needcharspace = True

            if origin is None:
                origin = x
            text = ''.join(chars)
            transform = mult_matrix((fontsize * scaling, 0, 0, fontsize, 0, rise),
                                    translate_matrix(matrix, (origin, y)))
            self.text_items.append(TextItem(text, transform, (x - origin) * unit_scale, font_name))
            segments.append(text)

        textstate.linematrix = (x, y)
        return segments


class RecordingInterpreter(PDFPageInterpreter):
    """
    Page interpreter that records state, colour, text and image operations
    into the device's operator list as it executes them.
    """

    def process_page(self, page):
        # Same orientation handling as pdfminer, anchored on the crop box so
        # coordinates line up with the fitz raster
        (x0, y0, x1, y1) = page.cropbox
        if page.rotate == 90:
            ctm = (0, -1, 1, 0, -y0, x1)
        elif page.rotate == 180:
            ctm = (-1, 0, 0, -1, x1, y1)
        elif page.rotate == 270:
            ctm = (0, 1, -1, 0, y1, -x0)
        else:
            ctm = (1, 0, 0, 1, -x0, -y0)
        self.device.begin_page(page, ctm)
        self.render_contents(page.resources, page.contents, ctm=ctm)
        self.device.end_page(page)

    def _record(self, fn: str, args: List[Any] = None):
        self.device.operators.add(fn, args)

    def do_q(self):
        self._record(OPS.SAVE)
        super().do_q()

    def do_Q(self):
        self._record(OPS.RESTORE)
        super().do_Q()

    def do_cm(self, a1, b1, c1, d1, e1, f1):
        self._record(OPS.TRANSFORM, [a1, b1, c1, d1, e1, f1])
        super().do_cm(a1, b1, c1, d1, e1, f1)

    def do_g(self, gray):
        super().do_g(gray)
        self._record(OPS.SET_FILL_GRAY, [gray])

    def do_rg(self, r, g, b):
        super().do_rg(r, g, b)
        self._record(OPS.SET_FILL_RGB_COLOR, [r, g, b])

    def do_k(self, c, m, y, k):
        super().do_k(c, m, y, k)
        try:
            self._record(OPS.SET_FILL_RGB_COLOR, cmyk_to_rgb(c, m, y, k))
        except TypeError:
            logger.debug(f"Malformed CMYK fill colour {(c, m, y, k)!r}")

    def do_scn(self):
        super().do_scn()
        ncolor = self.graphicstate.ncolor
        components = list(ncolor) if isinstance(ncolor, (list, tuple)) else [ncolor]
        if len(components) == 4 and all(isinstance(v, (int, float)) for v in components):
            components = cmyk_to_rgb(*components)
        self._record(OPS.SET_FILL_COLOR_N, components)

    def do_Tf(self, fontid, fontsize):
        super().do_Tf(fontid, fontsize)
        self.device.register_font(str(literal_name(fontid)), self.textstate.font)

    def _show(self, fn: str, seq):
        if self.textstate.font is None:
            logger.debug("Text shown without a selected font; skipped")
            return
        segments = self.device.render_string(self.textstate, seq, self.graphicstate.ncs,
                                             self.graphicstate.copy())
        if fn == OPS.SHOW_SPACED_TEXT:
            self._record(fn, [segments])
        else:
            self._record(fn, [''.join(s for s in segments if isinstance(s, str))])

    def do_TJ(self, seq):
        self._show(OPS.SHOW_SPACED_TEXT, seq)

    def do_Tj(self, s):
        self._show(OPS.SHOW_TEXT, [s])

    def do__q(self, s):
        self.do_T_a()
        self._show(OPS.NEXT_LINE_SHOW_TEXT, [s])

    def do__w(self, aw, ac, s):
        self.do_Tw(aw)
        self.do_Tc(ac)
        self.do_T_a()
        self._show(OPS.NEXT_LINE_SET_SPACING_SHOW_TEXT, [s])

    def do_Do(self, xobjid_arg):
        try:
            xobj = stream_value(self.xobjmap[literal_name(xobjid_arg)])
        except (KeyError, TypeError):
            super().do_Do(xobjid_arg)
            return

        subtype = xobj.get('Subtype')
        if subtype is LITERAL_IMAGE:
            fn = OPS.PAINT_IMAGE_MASK_XOBJECT if xobj.get('ImageMask') else OPS.PAINT_IMAGE_XOBJECT
            self._record(fn)
            super().do_Do(xobjid_arg)
        elif subtype is LITERAL_FORM and 'BBox' in xobj:
            matrix = list(list_value(xobj.get('Matrix', (1, 0, 0, 1, 0, 0))))
            bbox = list(list_value(xobj['BBox']))
            self._record(OPS.PAINT_FORM_XOBJECT_BEGIN, [matrix, bbox])
            super().do_Do(xobjid_arg)
            self._record(OPS.PAINT_FORM_XOBJECT_END)
        else:
            super().do_Do(xobjid_arg)

    def do_EI(self, obj):
        self._record(OPS.PAINT_INLINE_IMAGE_XOBJECT)
        super().do_EI(obj)


class SourcePage:
    """
    One page of an open document.

    The content stream is interpreted once, on first access to either the
    operator list or the text content.
    """

    def __init__(self, page_num: int, miner_page, fitz_page, rsrcmgr: PDFResourceManager):
        self.page_num = page_num
        self._miner_page = miner_page
        self._fitz_page = fitz_page
        self._rsrcmgr = rsrcmgr
        self._device: Optional[RecordingDevice] = None

        rect = fitz_page.rect
        self.width = rect.width
        self.height = rect.height

    def _interpret(self) -> RecordingDevice:
        if self._device is None:
            device = RecordingDevice(self._rsrcmgr)
            interpreter = RecordingInterpreter(self._rsrcmgr, device)
            interpreter.process_page(self._miner_page)
            logger.debug(f"Page {self.page_num + 1}: recorded {len(device.operators)} operations, "
                         f"{len(device.text_items)} text items, {len(device.fonts)} fonts")
            self._device = device
        return self._device

    def get_operator_list(self) -> OperatorList:
        return self._interpret().operators

    def get_text_content(self) -> List[TextItem]:
        return self._interpret().text_items

    def get_font(self, name: str) -> Optional[FontInfo]:
        """Font object for a resource name, or None if unknown."""
        return self._interpret().fonts.get(name)

    def render(self, scale: float) -> PageRaster:
        """
        Rasterize the page.

        Args:
            scale: Pixels per point

        Returns:
            PageRaster with RGB pixels
        """
        pix = self._fitz_page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        pixels = np.frombuffer(pix.samples, dtype=np.uint8).reshape(pix.height, pix.width, pix.n)
        return PageRaster(pixels.copy(), scale)


class PDFParser:
    """
    Opens a PDF from a path or bytes and hands out SourcePage objects.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize PDF Parser with configuration.

        Args:
            config: Parser configuration dictionary
        """
        self.config = config or {}
        self.doc = None
        self._miner_doc = None
        self._miner_pages: List[Any] = []
        self._stream = None
        self._rsrcmgr = None

    def open(self, source: Union[str, Path, bytes]):
        """
        Open a PDF document.

        Args:
            source: Path to the PDF file, or its bytes

        Raises:
            DocumentOpenError: If the document cannot be opened by either backend
        """
        self.close()
        try:
            if isinstance(source, (bytes, bytearray)):
                data = bytes(source)
                label = f"<{len(data)} bytes>"
            else:
                label = str(source)
                data = Path(source).read_bytes()

            self.doc = fitz.open(stream=data, filetype='pdf')
            self._stream = io.BytesIO(data)
            self._miner_doc = PDFDocument(MinerParser(self._stream))
            self._miner_pages = list(PDFPage.create_pages(self._miner_doc))
            self._rsrcmgr = PDFResourceManager(caching=True)
        except Exception as e:
            self.close()
            raise DocumentOpenError(f"Failed to open PDF: {e}") from e

        if len(self._miner_pages) != len(self.doc):
            logger.warning(f"Page count mismatch: {len(self.doc)} rendered vs "
                           f"{len(self._miner_pages)} interpreted; using the smaller")

        logger.info(f"Successfully opened PDF: {label}")
        logger.info(f"Total pages: {self.get_page_count()}")

    def close(self):
        """Close the PDF document."""
        if self.doc is not None:
            self.doc.close()
        self.doc = None
        self._miner_doc = None
        self._miner_pages = []
        if self._stream is not None:
            self._stream.close()
        self._stream = None
        self._rsrcmgr = None

    def get_page_count(self) -> int:
        """Get the total number of pages in the PDF."""
        if self.doc is None:
            return 0
        return min(len(self.doc), len(self._miner_pages))

    @property
    def page_count(self) -> int:
        return self.get_page_count()

    def get_page(self, page_num: int) -> SourcePage:
        """
        Get one page.

        Args:
            page_num: Page number (0-indexed)

        Returns:
            SourcePage
        """
        if page_num < 0 or page_num >= self.get_page_count():
            raise IndexError(f"Page {page_num} out of range (0..{self.get_page_count() - 1})")
        return SourcePage(page_num, self._miner_pages[page_num], self.doc[page_num], self._rsrcmgr)
