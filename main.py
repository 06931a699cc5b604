#!/usr/bin/env python3
"""
PDF to PPTX Converter - Main Entry Point
Rebuilds PDF pages as PowerPoint slides with editable text.
"""

import sys
import signal
import argparse
import logging
from pathlib import Path
import yaml
from typing import Dict, Any

from pdf2slides.converter import PDFToPPTXConverter, CancellationToken
from pdf2slides.exceptions import ConversionCancelled, Pdf2SlidesError
from pdf2slides.rebuilder.coordinate_mapper import OutputMode

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130

DEFAULT_CONFIG = {
    'parser': {'min_image_size': 20, 'image_scale': 2.5, 'dedup_grid': 4,
               'min_crop_pixels': 8, 'default_font': 'Arial'},
    'analyzer': {'line_tolerance_ratio': 0.55, 'merge_gap_ratio': 0.8,
                 'space_gap_ratio': 0.2, 'size_tolerance': 0.5},
    'rebuilder': {'page_margin': 5, 'text_padding': 0.08, 'min_font_size': 6,
                  'background_color': 'FFFFFF'},
    'mapper': {'font_mapping': {}, 'default_font': 'Arial'},
    'generator': {'template': None},
    'converter': {'mode': 'hybrid', 'background_scale': 3.0,
                  'background_format': 'JPEG', 'background_quality': 95}
}


def setup_logging(level: str = "INFO"):
    """
    Setup logging configuration.

    Args:
        level: Logging level
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler('pdf2slides.log')
        ]
    )


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file

    Returns:
        Configuration dictionary
    """
    if config_path and Path(config_path).exists():
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    # Default config path
    default_config = Path(__file__).parent / 'config' / 'config.yaml'
    if default_config.exists():
        with open(default_config, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    # Fallback to built-in defaults
    return {section: dict(values) for section, values in DEFAULT_CONFIG.items()}


def default_output_path(input_path: str) -> str:
    """input.pdf → input.pptx, next to the input."""
    return str(Path(input_path).with_suffix('.pptx'))


def convert_pdf_to_pptx(pdf_path: str, output_path: str, config: Dict[str, Any],
                        mode: str = None, cancel_token: CancellationToken = None) -> int:
    """
    Convert a PDF file to PPTX.

    Args:
        pdf_path: Path to input PDF file
        output_path: Path to output PPTX file
        config: Configuration dictionary
        mode: Output mode override
        cancel_token: Token set when the user interrupts

    Returns:
        Process exit code
    """
    logger = logging.getLogger(__name__)

    def on_progress(percent: int):
        logger.debug(f"Progress: {percent}%")

    def on_status(message: str):
        logger.info(message)

    try:
        converter = PDFToPPTXConverter(config)
        result = converter.convert(pdf_path, output_path, mode=mode,
                                   cancel_token=cancel_token,
                                   progress_callback=on_progress,
                                   status_callback=on_status)
    except ConversionCancelled as e:
        logger.warning(f"{e}; no output written")
        return EXIT_CANCELLED
    except Pdf2SlidesError as e:
        logger.error(f"Conversion failed: {e}")
        return EXIT_FAILURE
    except Exception as e:
        logger.error(f"Conversion failed: {e}", exc_info=True)
        return EXIT_FAILURE

    logger.info("=" * 60)
    logger.info("Conversion complete!")
    logger.info(f"Input:  {pdf_path}")
    logger.info(f"Output: {result.output_path}")
    logger.info(f"Slides: {result.num_pages} ({result.mode} mode)")
    logger.info("=" * 60)
    return EXIT_OK


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Convert PDF files to PowerPoint presentations',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py input.pdf
  python main.py input.pdf output.pptx --mode clean
  python main.py input.pdf output.pptx --config custom_config.yaml
  python main.py input.pdf output.pptx --log-level DEBUG
        """
    )

    parser.add_argument('input', help='Input PDF file path')
    parser.add_argument('output', nargs='?', help='Output PPTX file path (default: input name with .pptx)')
    parser.add_argument('--mode', choices=list(OutputMode.ALL) + list(OutputMode.ALIASES),
                        help='Output mode (default: from config, hybrid)')
    parser.add_argument('--config', help='Path to configuration file')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')
    parser.add_argument('--scale', type=float, help='Render scale for page backgrounds')

    args = parser.parse_args()

    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    # Validate input file
    if not Path(args.input).exists():
        logger.error(f"Input file not found: {args.input}")
        return EXIT_FAILURE

    # Load configuration
    config = load_config(args.config)

    # Override with command line arguments
    if args.scale:
        config.setdefault('converter', {})['background_scale'] = args.scale

    output_path = args.output or default_output_path(args.input)

    # Ctrl-C stops the job before the next page instead of killing it mid-write
    cancel_token = CancellationToken()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_token.cancel())
    try:
        return convert_pdf_to_pptx(args.input, output_path, config, args.mode, cancel_token)
    finally:
        signal.signal(signal.SIGINT, previous_handler)


if __name__ == '__main__':
    sys.exit(main())
