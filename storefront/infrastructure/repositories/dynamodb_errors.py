"""DynamoDBのエラー判定."""
from botocore.exceptions import ClientError

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def is_conditional_check_failed(error: ClientError) -> bool:
    """条件付き書き込みの条件不成立によるエラーか判定する."""
    return error.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED
