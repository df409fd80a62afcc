"""Beat compiler package: scene model, resource resolution, Beat -> SceneState."""
from beatstage.compiler.compile import compile_beat, compile_sequence
from beatstage.compiler.resources import ResourceResolver, SymbolicResolver, TableResolver
from beatstage.compiler.scene import CharacterState, DialogueState, SceneState, StagePoint, TheaterScript

__all__ = [
    "compile_beat",
    "compile_sequence",
    "ResourceResolver",
    "SymbolicResolver",
    "TableResolver",
    "CharacterState",
    "DialogueState",
    "SceneState",
    "StagePoint",
    "TheaterScript",
]
