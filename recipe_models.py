#recipe_models.py
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def new_ingredient_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Ingredient:
    """A single normalized ingredient line."""
    name: str
    amount: str = ""
    unit: str = ""
    id: str = field(default_factory=new_ingredient_id)

    def render(self) -> str:
        """Rebuild the '<amount> <unit> <name>' line, skipping empty parts."""
        return " ".join(part for part in (self.amount, self.unit, self.name) if part)

    def to_dict(self) -> Dict[str, str]:
        return {'id': self.id, 'name': self.name, 'amount': self.amount, 'unit': self.unit}


@dataclass(frozen=True)
class ParsedRecipe:
    """Result of one extraction call. Times are in minutes."""
    title: str
    ingredients: List[Ingredient]
    directions: List[str]
    servings: Optional[int] = None
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    source_url: Optional[str] = None
    tags: Optional[List[str]] = None
    tools: Optional[List[str]] = None
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Outbound shape consumed by the storage/UI layer (camelCase keys, no None values)."""
        data = {
            'title': self.title,
            'ingredients': [ing.to_dict() for ing in self.ingredients],
            'directions': list(self.directions),
            'servings': self.servings,
            'prepTime': self.prep_time,
            'cookTime': self.cook_time,
            'sourceUrl': self.source_url,
            'tags': list(self.tags) if self.tags is not None else None,
            'tools': list(self.tools) if self.tools is not None else None,
            'imageUrl': self.image_url,
        }
        return {k: v for k, v in data.items() if v is not None}
