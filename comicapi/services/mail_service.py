import logging
from enum import Enum
from typing import Optional

import boto3

from comicapi.config import Settings

logger = logging.getLogger(__name__)


class MailPurpose(str, Enum):
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


_SUBJECTS = {
    MailPurpose.EMAIL_VERIFICATION: "[Comic] 이메일 인증 코드",
    MailPurpose.PASSWORD_RESET: "[Comic] 비밀번호 재설정 코드",
}


class MailService:
    """일회용 코드 메일 발송

    MAIL_BACKEND=ses 이면 AWS SES 로 보내고, log 이면 발송 사실만 기록한다.
    코드 값은 어떤 경우에도 로그에 남기지 않는다.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.backend = settings.MAIL_BACKEND.lower()
        self._ses = None

    def _client(self):
        if self._ses is None:
            if self.settings.AWS_ACCESS_KEY_ID and self.settings.AWS_SECRET_ACCESS_KEY:
                self._ses = boto3.client(
                    "ses",
                    region_name=self.settings.AWS_REGION,
                    aws_access_key_id=self.settings.AWS_ACCESS_KEY_ID,
                    aws_secret_access_key=self.settings.AWS_SECRET_ACCESS_KEY,
                )
            else:
                self._ses = boto3.client("ses", region_name=self.settings.AWS_REGION)
        return self._ses

    def send_code(self, to_email: str, code: str, purpose: MailPurpose) -> Optional[str]:
        """코드 메일 발송. SES 메시지 ID 를 반환 (log 백엔드는 None)"""
        if self.backend != "ses":
            logger.info(f"Mail dispatched ({purpose.value}) to {to_email} [log backend]")
            return None

        try:
            response = self._client().send_email(
                Source=self.settings.SES_FROM_EMAIL,
                Destination={"ToAddresses": [to_email]},
                Message={
                    "Subject": {"Data": _SUBJECTS[purpose], "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": self._render(code, purpose), "Charset": "UTF-8"}
                    },
                },
            )
        except Exception as e:
            logger.error(f"Failed to send {purpose.value} mail via SES: {type(e).__name__}")
            raise
        logger.info(
            f"Mail dispatched ({purpose.value}) to {to_email}, MessageId: {response['MessageId']}"
        )
        return response["MessageId"]

    def _render(self, code: str, purpose: MailPurpose) -> str:
        if purpose == MailPurpose.PASSWORD_RESET:
            hours = self.settings.PASSWORD_RESET_EXPIRE_HOURS
            intro = "비밀번호 재설정을 위해 아래 코드를 입력해 주세요."
        else:
            hours = self.settings.EMAIL_VERIFICATION_EXPIRE_HOURS
            intro = "이메일 인증을 위해 아래 코드를 입력해 주세요."
        return f"""
<!DOCTYPE html>
<html>
  <body style="font-family: sans-serif; line-height: 1.6;">
    <p>{intro}</p>
    <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px;">{code}</p>
    <p>이 코드는 {hours}시간 동안 유효합니다.</p>
  </body>
</html>
"""
