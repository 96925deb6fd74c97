from .track import AnimationType, Keyframe
from .anim import Anim

__all__ = ['AnimationType', 'Keyframe', 'Anim']
