"""
JSON views of the ORM rows, using the camelCase keys of the HTTP contract.

Relations are only serialized when the caller asks for them, so a view never
triggers a lazy load the reader did not plan for.
"""


def _iso(dt):
    # Stored values are naive UTC
    return dt.isoformat() + "Z" if dt is not None else None


def serialize_user(user) -> dict:
    return {
        "id":              user.id,
        "email":           user.email,
        "firstName":       user.first_name,
        "lastName":        user.last_name,
        "profileImageUrl": user.profile_image_url,
        "createdAt":       _iso(user.created_at),
        "updatedAt":       _iso(user.updated_at),
    }


def serialize_profile(profile) -> dict:
    return {
        "id":      profile.id,
        "userId":  profile.user_id,
        "bio":     profile.bio,
        "college": profile.college,
        "course":  profile.course,
        "year":    profile.year,
        "role":    profile.role,
    }


def serialize_comment(comment, author: bool = False) -> dict:
    d = {
        "id":        comment.id,
        "postId":    comment.post_id,
        "authorId":  comment.author_id,
        "content":   comment.content,
        "createdAt": _iso(comment.created_at),
    }
    if author:
        d["author"] = serialize_user(comment.author)
    return d


def serialize_post(post, author: bool = False, comments=None) -> dict:
    """PostView when *author* is set; *comments* embeds an already-loaded thread."""
    d = {
        "id":            post.id,
        "authorId":      post.author_id,
        "content":       post.content,
        "type":          post.type,
        "mediaUrls":     list(post.media_urls or []),
        "tags":          list(post.tags or []),
        "likesCount":    post.likes_count,
        "commentsCount": post.comments_count,
        "createdAt":     _iso(post.created_at),
    }
    if author:
        d["author"] = serialize_user(post.author)
    if comments is not None:
        d["comments"] = [serialize_comment(c, author=True) for c in comments]
    return d


def serialize_resource(resource, author: bool = False) -> dict:
    d = {
        "id":          resource.id,
        "title":       resource.title,
        "description": resource.description,
        "category":    resource.category,
        "fileUrl":     resource.file_url,
        "authorId":    resource.author_id,
        "createdAt":   _iso(resource.created_at),
    }
    if author:
        d["author"] = serialize_user(resource.author)
    return d


def serialize_event(event, author: bool = False) -> dict:
    d = {
        "id":          event.id,
        "title":       event.title,
        "description": event.description,
        "date":        _iso(event.date),
        "location":    event.location,
        "authorId":    event.author_id,
        "createdAt":   _iso(event.created_at),
    }
    if author:
        d["author"] = serialize_user(event.author)
    return d
