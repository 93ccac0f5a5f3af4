# enums.py
from enum import Enum as PyEnum


class RoleType(str, PyEnum):
    entrepreneur = "entrepreneur"
    investor = "investor"
    admin = "admin"


class RegistrationStatus(str, PyEnum):
    pendente_analise = "pendente_analise"
    em_analise = "em_analise"
    aprovada = "aprovada"
    reprovada = "reprovada"
    incompleto = "incompleto"


# Empresas seguem o mesmo ciclo de vida do cadastro
CompanyStatus = RegistrationStatus


class CreditRequestStatus(str, PyEnum):
    pendente = "pendente"
    em_analise = "em_analise"
    aprovada = "aprovada"
    reprovada = "reprovada"


class ChangeStatus(str, PyEnum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class AudienceType(str, PyEnum):
    entrepreneur = "entrepreneur"
    investor = "investor"
    both = "both"


class AdminProfile(str, PyEnum):
    visualizacao = "visualizacao"
    aprovacao_empresa = "aprovacao_empresa"
    aprovacao_credito = "aprovacao_credito"
    admin = "admin"


class PartyType(str, PyEnum):
    company = "company"
    investor = "investor"
    admin = "admin"


class ValuationMethod(str, PyEnum):
    dcf = "dcf"
    multiples = "multiples"


class ValuationStatus(str, PyEnum):
    draft = "draft"
    completed = "completed"


class GuaranteeType(str, PyEnum):
    imovel = "imovel"
    veiculo = "veiculo"
    recebivel = "recebivel"
