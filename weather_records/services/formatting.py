def format_number(value: float) -> str:
    """
    Render a number the way it reads in captions and export headers: `12`
    rather than `12.0`, and `12.35` unchanged.
    """
    text = repr(float(value))
    if text.endswith(".0"):
        return text[:-2]
    return text
