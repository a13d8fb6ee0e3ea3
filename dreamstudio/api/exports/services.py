# dreamstudio/api/exports/services.py
import logging
from typing import Dict, Any

from dreamstudio.models.user import User


class ExportService:
    """
    스토리 내보내기 어댑터.
    아직 실제 파일(PDF, EPUB, ZIP)을 만들지 않고, 접근 권한을 확인한 뒤 요청 접수 응답만 반환합니다.
    """
    def __init__(self, story_service):
        self.story_service = story_service

    def _story_summary(self, story_id: str, caller_id: str, fmt: str) -> Dict[str, Any]:
        story = self.story_service.get_story(story_id, caller_id)
        logging.info(f"{fmt} export requested (story_id: {story_id})")
        return {
            "success": True,
            "message": f"{fmt} export is not available yet",
            "data": {
                "storyId": story.story_id,
                "title": story.title,
                "sceneCount": story.scene_count,
            }
        }

    def to_pdf(self, story_id: str, caller_id: str) -> Dict[str, Any]:
        return self._story_summary(story_id, caller_id, 'PDF')

    def to_epub(self, story_id: str, caller_id: str) -> Dict[str, Any]:
        return self._story_summary(story_id, caller_id, 'EPUB')

    def images_archive(self, story_id: str, caller_id: str) -> Dict[str, Any]:
        story = self.story_service.get_story(story_id, caller_id)
        image_urls = [url for url in story.image_urls() if url]
        return {
            "success": True,
            "message": "Image archive export is not available yet",
            "data": {
                "storyId": story.story_id,
                "title": story.title,
                "imageCount": len(image_urls),
                "imageUrls": image_urls,
            }
        }

    def user_data_archive(self, user: User) -> Dict[str, Any]:
        """호출자 본인의 계정 정보와 소유한 스토리 제목 목록을 반환합니다."""
        stories = self.story_service.list_all_for_owner(user.firebase_uid)
        return {
            "success": True,
            "message": "User data export is not available yet",
            "data": {
                "user": {
                    "uid": user.firebase_uid,
                    "email": user.email,
                    "displayName": user.display_name,
                },
                "stories": {
                    "count": len(stories),
                    "titles": [story.title for story in stories],
                }
            }
        }
