"""
The MODEL layer contains pure data structures and business logic.
It has NO knowledge of the GUI (Qt) or the rendering surface.
It deals with font metadata, canvas geometry, hit testing and search.
"""
CANVAS_SIZE = 600.0
CANVAS_PADDING = 50.0
