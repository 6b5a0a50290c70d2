"""
Chart geometry without Qt: scales, axis order, layouts and polylines.
"""
