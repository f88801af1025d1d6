from typing import Tuple

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def normalize_paging(page: int, page_size: int, max_page_size: int = MAX_PAGE_SIZE) -> Tuple[int, int]:
    """Clamp a requested page to a 1-based page number and a bounded size."""
    p = page if page and page > 0 else 1
    ps = page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE
    return p, min(ps, max_page_size)


def page_window(page: int, page_size: int) -> Tuple[int, int]:
    """(offset, limit) for a normalized page."""
    p, ps = normalize_paging(page, page_size)
    return (p - 1) * ps, ps
