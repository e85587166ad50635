from collections import defaultdict
from enum import Enum
from typing import Dict, Iterable, List, Optional

from horeca_catalog.models.common import document_to_dict, stringify_id


class CategoryLevel(str, Enum):
    """department -> category -> subcategory -> type"""
    DEPARTMENT = "department"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    TYPE = "type"


def category_document_to_dict(doc: dict) -> dict:
    data = document_to_dict(doc)
    data["parent_id"] = stringify_id(data.get("parent_id"))
    data.setdefault("image", "")
    data.setdefault("tagline", "")
    return data


def build_category_tree(categories: Iterable[dict]) -> List[dict]:
    """
    평탄한 카테고리 목록을 parent_id 기준으로 묶어 트리로 변환.
    각 레벨은 이름순으로 정렬되고, 노드는 항상 children 리스트를 가진다.
    부모를 찾을 수 없는 카테고리는 최상위로 올린다.
    """
    nodes: Dict[str, dict] = {}
    for category in categories:
        node = category_document_to_dict(category) if "_id" in category else dict(category)
        node["children"] = []
        nodes[node["id"]] = node

    by_parent: Dict[Optional[str], List[dict]] = defaultdict(list)
    for node in nodes.values():
        parent_id = node.get("parent_id")
        if parent_id is not None and parent_id not in nodes:
            parent_id = None
        by_parent[parent_id].append(node)

    def attach(parent_id: Optional[str]) -> List[dict]:
        children = sorted(by_parent.get(parent_id, []), key=lambda n: n.get("name") or "")
        for child in children:
            child["children"] = attach(child["id"])
        return children

    # 순환에 걸린 카테고리는 루트에서 도달할 수 없으므로 트리에 나타나지 않는다
    return attach(None)


def find_node(tree: List[dict], category_id: str) -> Optional[dict]:
    """DFS 로 트리에서 노드 검색"""
    for node in tree:
        if node["id"] == category_id:
            return node
        found = find_node(node.get("children") or [], category_id)
        if found is not None:
            return found
    return None


def collect_descendant_ids(node: dict) -> List[str]:
    """자기 자신 포함, 모든 하위 카테고리 ID"""
    ids = [node["id"]]
    for child in node.get("children") or []:
        ids.extend(collect_descendant_ids(child))
    return ids
