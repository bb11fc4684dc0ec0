from pydantic import BaseModel


class ReferralStats(BaseModel):
    total: int
    pending: int
    completed: int


class ReferralLinkRead(BaseModel):
    code: str
    referral_link: str
    stats: ReferralStats
