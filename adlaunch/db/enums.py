from enum import Enum


class PlatformEnum(str, Enum):
    google = "google"
    facebook = "facebook"
    linkedin = "linkedin"
    tiktok = "tiktok"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    PlatformEnum.google: "Google",
    PlatformEnum.facebook: "Facebook",
    PlatformEnum.linkedin: "LinkedIn",
    PlatformEnum.tiktok: "TikTok",
}
