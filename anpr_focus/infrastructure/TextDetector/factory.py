from anpr_focus.core.config import settings
from anpr_focus.domain.Interfaces.text_detector import ITextDetector

def create_text_detector() -> ITextDetector:
    if settings.text_detector.lower() == "dummy":
        from anpr_focus.infrastructure.TextDetector.dummy_text_detector import DummyTextDetector
        return DummyTextDetector()
    else:
        # EasyOCR (por defecto)
        from anpr_focus.infrastructure.TextDetector.easyocr_text_detector import EasyOCRTextDetector
        return EasyOCRTextDetector()
