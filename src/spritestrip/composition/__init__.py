from spritestrip.composition.compositor import OPAQUE, TRANSPARENT, BlendFn, blit
from spritestrip.composition.scene import build_scene, plan_slots

__all__ = ["OPAQUE", "TRANSPARENT", "BlendFn", "blit", "build_scene", "plan_slots"]
