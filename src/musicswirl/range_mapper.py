def map_range(value, start1, stop1, start2, stop2):
    """
    Re-map a number from one range to another.

    Values outside [start1, stop1] are extrapolated, not clamped. Works
    elementwise on numpy arrays. A degenerate source range (start1 == stop1)
    divides by zero.

    >>> map_range(50, 0, 100, 0, 200)
    100.0
    """
    return (value - start1) / (stop1 - start1) * (stop2 - start2) + start2
