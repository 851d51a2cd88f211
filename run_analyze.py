#!/usr/bin/env python
"""
Analyze a plant or pest photo from the command line.
"""

import argparse
import logging
import os
import sys

# make the project root importable when run as a script
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from agrihub.application.services.pest_service import analyze_pest, pest_report
from agrihub.application.services.plant_service import SUPPORTED_LANGUAGES, PlantAnalysisSession
from agrihub.application.services.session import new_tracker
from agrihub.domain.errors import DeviceError
from agrihub.domain.speech import ReadAloudSession
from agrihub.infra.config import get_config
from agrihub.infra.devices import OpenCVCamera, Pyttsx3SpeechEngine, capture_photo
from agrihub.observability.logging_utils import init_logging
from agrihub.prompts.report_messages import format_pest_report, format_plant_sections
from agrihub.schemas import ImageUpload

logger = logging.getLogger(__name__)


def _print_progress(value: int) -> None:
    if value:
        print(f"[{value:>3}%]", file=sys.stderr)


def _load_image(args) -> ImageUpload:
    if args.camera:
        return capture_photo(OpenCVCamera(get_config().camera_index))
    return ImageUpload.from_path(args.image)


def main():
    parser = argparse.ArgumentParser(
        description="Analyze a plant or pest photo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
    python run_analyze.py --image leaf.jpg
    python run_analyze.py --image leaf.jpg --language hi --read-aloud
    python run_analyze.py --kind pest --camera
        """
    )
    parser.add_argument('--kind', choices=['plant', 'pest'], default='plant',
                        help='what to analyze (default: plant)')
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--image', type=str, help='path to a photo')
    source.add_argument('--camera', action='store_true', help='capture a photo from the camera')
    parser.add_argument('--language', choices=list(SUPPORTED_LANGUAGES), default='en',
                        help='plant analysis language (default: en)')
    parser.add_argument('--read-aloud', action='store_true',
                        help='read each result section aloud')
    args = parser.parse_args()

    init_logging(log_path=get_config().log_path)
    try:
        image = _load_image(args)
    except (DeviceError, OSError) as exc:
        print(getattr(exc, "message", str(exc)), file=sys.stderr)
        return 1

    tracker = new_tracker(listener=_print_progress)
    if args.kind == "pest":
        outcome = analyze_pest(image, tracker=tracker)
        report = pest_report(outcome)
        sections = []
        text = format_pest_report(report) if report else ""
        if report:
            sections = [(report.pest_name, text)]
    else:
        session = PlantAnalysisSession(language=args.language, tracker=tracker)
        outcome = session.analyze(image)
        text = format_plant_sections(outcome.sections)
        sections = [(section.title, section.content) for section in outcome.sections]

    if not outcome.ok:
        print(outcome.error, file=sys.stderr)
        return 1
    if outcome.status == "degraded":
        logger.warning("reply could not be split into sections; showing it whole")
    print(text)

    if args.read_aloud and sections:
        with ReadAloudSession(Pyttsx3SpeechEngine(), args.language) as reader:
            for title, content in sections:
                reader.toggle(title, content)
    return 0


if __name__ == '__main__':
    sys.exit(main())
