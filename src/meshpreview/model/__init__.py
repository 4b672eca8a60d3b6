"""
The MODEL layer contains the MSH parsing engine and its data structures.
It has NO knowledge of the visualization (PyVista).
"""
