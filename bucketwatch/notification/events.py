OBJECT_CREATED_ALL = "s3:ObjectCreated:*"
OBJECT_CREATED_PUT = "s3:ObjectCreated:Put"
OBJECT_CREATED_POST = "s3:ObjectCreated:Post"
OBJECT_CREATED_COPY = "s3:ObjectCreated:Copy"
OBJECT_CREATED_COMPLETE_MULTIPART_UPLOAD = "s3:ObjectCreated:CompleteMultipartUpload"
OBJECT_REMOVED_ALL = "s3:ObjectRemoved:*"
OBJECT_REMOVED_DELETE = "s3:ObjectRemoved:Delete"
OBJECT_REMOVED_DELETE_MARKER_CREATED = "s3:ObjectRemoved:DeleteMarkerCreated"
OBJECT_REDUCED_REDUNDANCY_LOST_OBJECT = "s3:ReducedRedundancyLostObject"

KNOWN_EVENTS = (
    OBJECT_CREATED_ALL,
    OBJECT_CREATED_PUT,
    OBJECT_CREATED_POST,
    OBJECT_CREATED_COPY,
    OBJECT_CREATED_COMPLETE_MULTIPART_UPLOAD,
    OBJECT_REMOVED_ALL,
    OBJECT_REMOVED_DELETE,
    OBJECT_REMOVED_DELETE_MARKER_CREATED,
    OBJECT_REDUCED_REDUNDANCY_LOST_OBJECT,
)
