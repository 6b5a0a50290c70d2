"""
The MODEL layer contains pure data structures and business logic.
It has NO knowledge of the GUI (Qt) or the chart geometry.
It deals with survey rows, CSV I/O and region selection.
"""
