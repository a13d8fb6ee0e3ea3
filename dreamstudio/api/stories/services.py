# dreamstudio/api/stories/services.py
import math
import uuid
import logging
from typing import Optional, Dict, Any, List, Tuple

from dreamstudio.api.stories.schemas import StoryCreateSchema, StoryUpdateSchema
from dreamstudio.core.exceptions import Forbidden, NotFound, ValidationError, load_schema
from dreamstudio.models.story import Story, Scene, ANONYMOUS_USER_ID
from dreamstudio.services.segmind_service import random_seed
from dreamstudio.stores.base import StoryStore
from dreamstudio.utils.datetime_utils import DateTimeUtils

# API 정렬 키 -> 저장소 필드명
SORT_FIELDS = {
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
    'title': 'title',
}
DEFAULT_SORT = '-createdAt'

# 스토리 목록 조회 정책
LIST_SCOPE_OWNER = 'owner'
LIST_SCOPE_ALL = 'all'


def parse_sort(sort: Optional[str]) -> Tuple[str, bool]:
    """'-createdAt' 형식의 정렬 파라미터를 (필드명, 내림차순 여부)로 변환합니다."""
    sort = sort or DEFAULT_SORT
    descending = sort.startswith('-')
    key = sort.lstrip('-+')
    if key not in SORT_FIELDS:
        raise ValidationError.for_field('sort', f"Sort must be one of: {', '.join(SORT_FIELDS)} (prefix '-' for descending)")
    return SORT_FIELDS[key], descending


def unique_tags(tags: List[str]) -> List[str]:
    seen = []
    for tag in tags:
        if tag not in seen:
            seen.append(tag)
    return seen


def build_scenes(scene_data: List[Dict[str, Any]]) -> List[Scene]:
    scenes = [
        Scene(
            text=data['text'],
            image_url=data['image_url'],
            order=data['order'],
            image_prompt=data.get('image_prompt'),
        )
        for data in scene_data
    ]
    scenes.sort(key=lambda scene: scene.order)
    return scenes


class StoryService:
    """
    스토리 관련 비즈니스 로직을 담당하는 서비스 클래스.
    소유권/공개 여부 검사, 페이지네이션, 사용량 카운터 증가를 처리합니다.
    """
    def __init__(self, story_store: StoryStore, user_service, image_service=None,
                 list_scope: str = LIST_SCOPE_OWNER):
        if list_scope not in (LIST_SCOPE_OWNER, LIST_SCOPE_ALL):
            raise ValueError(f"'{list_scope}'은(는) 유효한 STORY_LIST_SCOPE 값이 아닙니다.")
        self.story_store = story_store
        self.user_service = user_service
        self.image_service = image_service
        self.list_scope = list_scope

    # --- 조회 ---

    def _paginate(self, filters: Dict[str, Any], sort: Tuple[str, bool], page: int, limit: int) -> Dict[str, Any]:
        if page < 1:
            raise ValidationError.for_field('page', 'Page must be at least 1')
        if limit < 1:
            raise ValidationError.for_field('limit', 'Limit must be at least 1')

        skip = (page - 1) * limit
        stories = self.story_store.find(filters, sort, skip=skip, limit=limit)
        total = self.story_store.count(filters)
        return {
            "stories": stories,
            "count": len(stories),
            "total": total,
            "pagination": {
                "page": page,
                "limit": limit,
                "pages": math.ceil(total / limit)
            }
        }

    def list_stories(self, caller_id: Optional[str], art_style: Optional[str] = None,
                     page: int = 1, limit: int = 10, sort: Optional[str] = None) -> Dict[str, Any]:
        """스토리 목록을 필터/정렬/페이지네이션하여 조회합니다. 'owner' 정책에서는 호출자 소유만 반환합니다."""
        filters = {}
        if self.list_scope == LIST_SCOPE_OWNER:
            filters['user_id'] = caller_id
        if art_style:
            filters['art_style'] = art_style
        return self._paginate(filters, parse_sort(sort), page, limit)

    def list_public_stories(self, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """공개 스토리 목록. 호출자와 관계없이 최신순으로 조회합니다."""
        return self._paginate({'is_public': True}, parse_sort(DEFAULT_SORT), page, limit)

    def list_all_for_owner(self, caller_id: str) -> List[Story]:
        return self.story_store.find({'user_id': caller_id}, parse_sort(DEFAULT_SORT))

    def _get_or_404(self, story_id: str) -> Story:
        story = self.story_store.get(story_id)
        if not story:
            raise NotFound('Story not found')
        return story

    def get_story(self, story_id: str, caller_id: Optional[str]) -> Story:
        story = self._get_or_404(story_id)
        if not story.can_be_read_by(caller_id):
            raise Forbidden('Not authorized to access this story')
        return story

    def _get_owned(self, story_id: str, caller_id: Optional[str], action: str) -> Story:
        story = self._get_or_404(story_id)
        if not story.is_owned_by(caller_id):
            raise Forbidden(f'Not authorized to {action} this story')
        return story

    # --- 생성/수정/삭제 ---

    def create_story(self, data: Dict[str, Any], caller_id: Optional[str]) -> Story:
        """새 스토리를 검증 후 저장하고, 소유자의 사용량 카운터를 증가시킵니다."""
        payload = load_schema(StoryCreateSchema(), data)
        scenes = build_scenes(payload['scenes'])

        story = Story(
            story_id=str(uuid.uuid4()),
            title=payload['title'],
            user_id=caller_id or ANONYMOUS_USER_ID,
            art_style=payload['art_style'],
            scenes=scenes,
            is_public=payload['is_public'],
            tags=unique_tags(payload['tags']),
        )
        if 'cover_image' in payload:
            story.cover_image = payload['cover_image']
        elif scenes:
            story.cover_image = scenes[0].image_url

        self.story_store.insert(story)
        logging.info(f"Story created (story_id: {story.story_id}, scenes: {story.scene_count})")

        if caller_id:
            self.user_service.record_usage(caller_id, stories_created=1, images_generated=len(scenes))
        return story

    def update_story(self, story_id: str, patch: Dict[str, Any], caller_id: Optional[str]) -> Story:
        """
        소유자만 수정할 수 있습니다. 전달된 최상위 필드만 교체하며,
        scenes가 교체되면 이전 장면에 없던 imageUrl 수만큼 images_generated를 증가시킵니다.
        """
        story = self._get_owned(story_id, caller_id, 'update')
        payload = load_schema(StoryUpdateSchema(), patch)
        if not payload:
            raise ValidationError.for_field('_schema', 'No fields to update')

        new_images_count = 0
        if 'scenes' in payload:
            existing_image_urls = set(story.image_urls())
            story.scenes = build_scenes(payload['scenes'])
            new_images_count = sum(1 for scene in story.scenes if scene.image_url not in existing_image_urls)

        for field_name in ('title', 'art_style', 'is_public', 'cover_image'):
            if field_name in payload:
                setattr(story, field_name, payload[field_name])
        if 'tags' in payload:
            story.tags = unique_tags(payload['tags'])

        story.sort_scenes()
        story.updated_at = DateTimeUtils.now()
        self.story_store.replace(story)
        logging.info(f"Story updated (story_id: {story_id}, fields: {list(payload.keys())})")

        if new_images_count > 0:
            self.user_service.record_usage(story.user_id, images_generated=new_images_count)
        return story

    def delete_story(self, story_id: str, caller_id: Optional[str]) -> bool:
        """
        스토리를 영구 삭제합니다. 참조하던 이미지 파일은 삭제하지 않습니다
        (여러 스토리가 같은 이미지를 참조할 수 있어 사용 여부를 추적하지 않음).
        """
        self._get_owned(story_id, caller_id, 'delete')
        self.story_store.delete(story_id)
        logging.info(f"Story deleted (story_id: {story_id})")
        return True

    def generate_images_for_story(self, story_id: str, caller_id: Optional[str],
                                  art_style: Optional[str] = None) -> Story:
        """
        스토리의 모든 장면에 대해 장면 텍스트로 이미지를 새로 생성합니다.
        장면마다 다른 seed를 사용하며, 하나라도 실패하면 아무것도 저장하지 않습니다.
        """
        if self.image_service is None:
            raise RuntimeError("StoryService에 image_service가 주입되지 않았습니다.")

        story = self._get_owned(story_id, caller_id, 'update')
        style = art_style or story.art_style
        base_seed = random_seed()

        for index, scene in enumerate(story.scenes):
            result = self.image_service.generate(scene.text, style, '', seed=base_seed + index)
            scene.image_url = result['image_url']
            scene.image_prompt = result['prompt']

        story.art_style = style
        story.sort_scenes()
        story.updated_at = DateTimeUtils.now()
        self.story_store.replace(story)

        if story.scenes:
            self.user_service.record_usage(story.user_id, images_generated=story.scene_count)
        return story
