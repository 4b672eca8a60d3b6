"""
The VIEW layer adapts parsed geometry to the rendering side (PyVista).
"""
