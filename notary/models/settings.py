from pydantic import BaseModel, ConfigDict, EmailStr

SETTINGS_DOC_ID = "company_profile"


class CompanySettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = SETTINGS_DOC_ID
    name: str = "Kantor Notaris/PPAT"
    address: str = ""
    email: EmailStr | None = None
    phone: str | None = None
    invoice_prefix: str = "INV"
