"""
Writes small MSH 2.2 meshes in both encodings for checking the loader by hand.

Usage:
    $ python generate_sample_meshes.py
    $ python -m meshpreview rectangle-ascii.msh
    $ python -m meshpreview rectangle-binary.msh
"""
import gmsh

X = 0.2
Y = 0.3

N_X = 3
N_Y = 4

for binary, name in zip([0, 1], ["rectangle-ascii", "rectangle-binary"]):

    gmsh.initialize()

    gmsh.model.add(f"{name}")

    lc = 0.1

    gmsh.model.geo.add_point(0, 0, 0, lc, 1)
    gmsh.model.geo.add_point(X, 0, 0, lc, 2)
    gmsh.model.geo.add_point(X, Y, 0, lc, 3)
    gmsh.model.geo.add_point(0, Y, 0, lc, 4)

    line1 = gmsh.model.geo.add_line(1, 2, 1)
    line2 = gmsh.model.geo.add_line(2, 3, 2)
    line3 = gmsh.model.geo.add_line(3, 4, 3)
    line4 = gmsh.model.geo.add_line(4, 1, 4)

    gmsh.model.geo.mesh.set_transfinite_curve(line1, N_X)
    gmsh.model.geo.mesh.set_transfinite_curve(line2, N_Y)
    gmsh.model.geo.mesh.set_transfinite_curve(line3, N_X)
    gmsh.model.geo.mesh.set_transfinite_curve(line4, N_Y)

    gmsh.model.geo.add_curve_loop([1, 2, 3, 4], 1)
    gmsh.model.geo.add_plane_surface([1], 1)

    # Lines end up as type-1 elements, which the loader must skip
    gmsh.model.add_physical_group(1, [1, 2, 3, 4], name="Boundary")
    gmsh.model.add_physical_group(2, [1], name="Domain")

    gmsh.model.geo.mesh.set_transfinite_surface(1, "Left", [1, 2, 3, 4])

    gmsh.model.geo.synchronize()
    gmsh.model.mesh.generate(2)

    # Sparse, shuffled node ids exercise the node id remapping
    old_tags, new_tags = gmsh.model.mesh.computeRenumbering(method="RCMK", elementTags=[])
    gmsh.model.mesh.renumberNodes(oldTags=old_tags, newTags=[3 * tag + 7 for tag in new_tags])

    gmsh.option.setNumber("Mesh.MshFileVersion", 2.2)
    gmsh.option.setNumber("Mesh.Binary", binary)
    gmsh.write(f"{name}.msh")

    gmsh.finalize()
