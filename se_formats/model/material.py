from typing import Optional


class SimpleMaterial:
    """Material payload made of three texture paths"""

    def __init__(self, diffuse_map: str = "", normal_map: str = "", specular_map: str = ""):
        self.diffuse_map = diffuse_map
        self.normal_map = normal_map
        self.specular_map = specular_map

    def __eq__(self, other) -> bool:
        if not isinstance(other, SimpleMaterial):
            return NotImplemented
        return (self.diffuse_map, self.normal_map, self.specular_map) == \
            (other.diffuse_map, other.normal_map, other.specular_map)

    def __repr__(self) -> str:
        return (f"SimpleMaterial(diffuse='{self.diffuse_map}', normal='{self.normal_map}', "
                f"specular='{self.specular_map}')")


class Material:
    """
    Named material referenced by index from mesh UV layers

    ``data`` is a SimpleMaterial, or None for a material kind this library
    does not know (only the name is kept).
    """

    def __init__(self, name: str, data: Optional[SimpleMaterial] = None):
        self.name = name
        self.data = data

    @property
    def is_simple(self) -> bool:
        return isinstance(self.data, SimpleMaterial)

    def to_json(self) -> dict:
        result = {"name": self.name, "simple": self.is_simple}
        if self.is_simple:
            result.update({
                "diffuse_map": self.data.diffuse_map,
                "normal_map": self.data.normal_map,
                "specular_map": self.data.specular_map,
            })
        return result

    def __repr__(self) -> str:
        return f"Material(name='{self.name}', data={self.data})"
