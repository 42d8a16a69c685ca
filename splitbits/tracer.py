import sys


__all__ = ["get_src_loc", "get_caller_frame"]


def get_src_loc(src_loc_at=0):
    # n-th  frame: get_src_loc()
    # n-1th frame: caller of get_src_loc() (usually constructor)
    # n-2th frame: caller of caller (usually user code)
    frame = sys._getframe(2 + src_loc_at)
    return (frame.f_code.co_filename, frame.f_lineno)


def get_caller_frame(src_loc_at=0):
    # Same frame numbering as `get_src_loc()`.
    return sys._getframe(2 + src_loc_at)
