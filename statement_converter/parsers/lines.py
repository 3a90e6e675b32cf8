"""Line segmentation for extracted statement text."""


def segment_lines(text: str) -> list[str]:
    """
    Split extracted text into trimmed, non-empty lines.

    Document order is preserved; the parsers rely on adjacency between lines.
    """
    if not text or not isinstance(text, str):
        return []

    return [line.strip() for line in text.splitlines() if line.strip()]
