import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.datastructures import UploadFile as StarletteUploadFile

from socialnet.dependencies import (
    get_comment_service,
    get_current_user,
    get_current_user_optional,
    get_page_request,
    get_post_service,
)
from socialnet.models.user import User
from socialnet.schemas.common_schema import ApiResponse, PaginationMeta
from socialnet.schemas.post_schema import (
    CommentCreateRequest,
    CommentData,
    CommentListData,
    CommentResponse,
    LikeToggleData,
    PostContentRequest,
    PostData,
    PostListData,
    PostResponse,
)
from socialnet.services.post_service import CommentService, PostService
from socialnet.utils.exceptions import InvalidFileFieldError
from socialnet.utils.pagination import PageRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/posts", tags=["Post"])

IMAGE_FIELD = "image"


async def _reject_unexpected_files(request: Request) -> None:
    """
    multipart 요청의 파일 필드 검사
    - image 이외의 필드로 온 파일, 또는 image 파일이 2개 이상이면 InvalidFileFieldError
    """
    form = await request.form()
    image_count = 0
    for key, value in form.multi_items():
        if not isinstance(value, StarletteUploadFile):
            continue
        if key != IMAGE_FIELD:
            raise InvalidFileFieldError(f"허용되지 않은 파일 필드입니다: {key}")
        image_count += 1
    if image_count > 1:
        raise InvalidFileFieldError("이미지는 한 개만 업로드할 수 있습니다.")


@router.get("", response_model=ApiResponse[PostListData], summary="공개 게시글 목록")
async def list_posts(
    page: PageRequest = Depends(get_page_request),
    viewer: Optional[User] = Depends(get_current_user_optional),
    service: PostService = Depends(get_post_service),
) -> ApiResponse[PostListData]:
    """
    공개 게시글을 최신순으로 조회
    - 로그인 상태이면 게시글별 isLiked 포함
    """
    views, pagination = await service.list_posts(page, viewer)
    return ApiResponse(
        data=PostListData(
            posts=[PostResponse.from_view(v) for v in views],
            pagination=PaginationMeta.from_pagination(pagination),
        )
    )


@router.get("/{post_id}", response_model=ApiResponse[PostData], summary="게시글 조회")
async def get_post(
    post_id: str,
    viewer: Optional[User] = Depends(get_current_user_optional),
    service: PostService = Depends(get_post_service),
) -> ApiResponse[PostData]:
    view = await service.get_post(post_id, viewer)
    return ApiResponse(data=PostData(post=PostResponse.from_view(view)))


@router.post(
    "",
    response_model=ApiResponse[PostData],
    status_code=status.HTTP_201_CREATED,
    summary="게시글 작성",
)
async def create_post(
    request: Request,
    content: str = Form(..., description="게시글 본문 (1~2000자)"),
    image: Optional[UploadFile] = File(None, description="첨부 이미지 (선택)"),
    current_user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> ApiResponse[PostData]:
    """
    multipart/form-data 게시글 작성
    1) 파일 필드 검사 (image 외 필드 거부)
    2) 본문 검증 (앞뒤 공백 제거 후 1~2000자)
    3) 이미지 저장 → 게시글 생성 (실패 시 이미지 삭제)
    """
    await _reject_unexpected_files(request)
    try:
        req = PostContentRequest(content=content)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    view = await service.create_post(req.content, current_user, image)
    return ApiResponse(message="게시글이 작성되었습니다.", data=PostData(post=PostResponse.from_view(view)))


@router.put("/{post_id}", response_model=ApiResponse[PostData], summary="게시글 수정")
async def update_post(
    post_id: str,
    req: PostContentRequest,
    current_user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> ApiResponse[PostData]:
    """
    작성자 본인만 수정 가능 (아니면 403)
    """
    view = await service.update_post(post_id, req.content, current_user)
    return ApiResponse(message="게시글이 수정되었습니다.", data=PostData(post=PostResponse.from_view(view)))


@router.delete("/{post_id}", response_model=ApiResponse, summary="게시글 삭제")
async def delete_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> ApiResponse:
    """
    작성자 본인만 삭제 가능, 댓글 / 좋아요 / 이미지 파일 함께 삭제
    """
    await service.delete_post(post_id, current_user)
    return ApiResponse(message="게시글이 삭제되었습니다.")


@router.post("/{post_id}/like", response_model=ApiResponse[LikeToggleData], summary="좋아요 토글")
async def toggle_like(
    post_id: str,
    current_user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> ApiResponse[LikeToggleData]:
    is_liked, like_count = await service.toggle_like(post_id, current_user)
    return ApiResponse(
        message="좋아요를 눌렀습니다." if is_liked else "좋아요를 취소했습니다.",
        data=LikeToggleData(is_liked=is_liked, like_count=like_count),
    )


@router.get("/{post_id}/comments", response_model=ApiResponse[CommentListData], summary="댓글 목록")
async def list_comments(
    post_id: str,
    page: PageRequest = Depends(get_page_request),
    service: CommentService = Depends(get_comment_service),
) -> ApiResponse[CommentListData]:
    comments, pagination = await service.list_comments(post_id, page)
    return ApiResponse(
        data=CommentListData(
            comments=[CommentResponse.from_comment(c) for c in comments],
            pagination=PaginationMeta.from_pagination(pagination),
        )
    )


@router.post(
    "/{post_id}/comments",
    response_model=ApiResponse[CommentData],
    status_code=status.HTTP_201_CREATED,
    summary="댓글 작성",
)
async def create_comment(
    post_id: str,
    req: CommentCreateRequest,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
) -> ApiResponse[CommentData]:
    comment = await service.create_comment(post_id, req.content, current_user)
    return ApiResponse(
        message="댓글이 작성되었습니다.",
        data=CommentData(comment=CommentResponse.from_comment(comment)),
    )


@router.delete("/comments/{comment_id}", response_model=ApiResponse, summary="댓글 삭제")
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
) -> ApiResponse:
    """
    댓글 작성자 본인만 삭제 가능 (아니면 403)
    """
    await service.delete_comment(comment_id, current_user)
    return ApiResponse(message="댓글이 삭제되었습니다.")
