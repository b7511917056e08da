from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from barber_assistant.application.utils.formatting import format_date, format_date_time, format_money
from barber_assistant.domain.entities.appointment import Appointment, AppointmentStatus
from barber_assistant.domain.entities.client import Client
from barber_assistant.domain.entities.financial_record import FinancialRecord, FinancialSummary, FinancialType
from barber_assistant.domain.entities.service import Service

CANCEL_HINT = "*0* - Cancelar"

BOOKING_CANCELLED = "❌ Agendamento cancelado."
NOTHING_TO_CANCEL = "❌ Agendamento cancelado. Quando quiser agendar, é só mandar *menu*!"
INVALID_SERVICE = "❌ Opção inválida. Digite o *número* do serviço desejado:"
INVALID_DATE = "❌ Opção inválida. Digite o número da data:"
INVALID_TIME = "❌ Opção inválida. Digite o número do horário:"
NO_SLOTS = "❌ Não há horários disponíveis para esta data. Por favor, escolha outra data."
SLOT_TAKEN = "❌ Este horário acabou de ser reservado. Por favor, escolha outro horário."
ASK_NAME = "👤 *QUAL É O SEU NOME?*\n\nPor favor, digite seu nome completo:"
INVALID_NAME = "❌ Nome inválido. Por favor, digite seu nome completo:"
CONFIRM_OR_CANCEL = "❌ Digite *confirmar* para confirmar ou *cancelar* para cancelar."
NO_SERVICES = "😕 Nenhum serviço disponível no momento. Tente novamente mais tarde."

OPERATION_CANCELLED = "❌ Operação cancelada."
TYPE_MENU = "💰 *NOVO REGISTRO*\n\n*1* - 💵 Entrada\n*2* - 💸 Saída\n\n*0* - Cancelar"
INVALID_TYPE = "❌ Opção inválida. Digite *1* para entrada ou *2* para saída:"
SESSION_EXPIRED = "❌ Sessão expirada. Por favor, tente novamente."
INVALID_CATEGORY = "❌ Opção inválida. Digite o número da categoria:"
INVALID_AMOUNT = "❌ Valor inválido. Digite um número positivo:"
ASK_DESCRIPTION = "📝 *DESCRIÇÃO*\n\nOpcional: Digite uma descrição ou *pular* para continuar:"

NO_APPOINTMENTS_YET = "📅 Você ainda não tem agendamentos. Para agendar, digite *agendar* ou *1*"
NO_UPCOMING_APPOINTMENTS = "📅 Você não tem agendamentos marcados. Para agendar, digite *agendar* ou *1*"


def main_menu(business_name: str) -> str:
    return (
        f"🏠 *{business_name}*\n\n"
        "Olá! Como posso ajudar?\n\n"
        "*1* - 💇 Agendar horário\n"
        "*2* - 📋 Ver serviços e preços\n"
        "*3* - 📅 Meus agendamentos\n"
        "*0* - Cancelar\n\n"
        "Digite o número da opção ou escreva o que precisa!"
    )


def help_text() -> str:
    return (
        "📖 *COMANDOS DISPONÍVEIS*\n\n"
        "• *menu* - Voltar ao menu principal\n"
        "• *serviços* - Ver serviços disponíveis\n"
        "• *agendar* - Iniciar agendamento\n"
        "• *meus horários* - Ver seus agendamentos\n"
        "• *cancelar* - Cancelar agendamento em andamento\n\n"
        "💬 Para agendar, basta digitar *agendar* ou *1*"
    )


def manager_menu() -> str:
    return (
        "👨‍💼 *MENU DO BARBEIRO*\n\n"
        "*hoje* - Agendamentos de hoje\n"
        "*amanhã* - Agendamentos de amanhã\n"
        "*semana* - Agendamentos da semana\n"
        "*agendamentos* - Todos os agendamentos\n"
        "*finanças* - Resumo financeiro\n"
        "*entrada* / *saída* - Registrar movimentação\n"
        "*clientes* - Lista de clientes\n"
        "*menu* - Este menu\n\n"
        "Gerencie sua barbearia!"
    )


def manager_welcome(bot_name: str) -> str:
    return (
        f"👋 *Bem-vindo ao {bot_name}!*\n\n"
        "Este é o grupo de gerenciamento da sua barbearia.\n\n"
        + manager_menu()
    )


def services_catalog(services: Sequence[Service]) -> str:
    text = "💈 *SERVIÇOS DISPONÍVEIS*\n\n"
    for service in services:
        text += f"• *{service.name}* - {format_money(service.price)}\n"
        text += f"  ⏱️ {service.duration} minutos\n"
        if service.description:
            text += f"  📝 {service.description}\n"
        text += "\n"
    text += "Para agendar, digite *agendar* ou *1*"
    return text


def services_menu(services: Sequence[Service]) -> str:
    text = "💇 *SERVIÇOS*\n\n"
    for i, service in enumerate(services, start=1):
        text += f"*{i}* - {service.name} ({format_money(service.price)})\n"
    text += f"\n{CANCEL_HINT}"
    return text


def dates_menu(dates: Sequence[str]) -> str:
    text = "📅 *SELECIONE A DATA*\n\n"
    for i, day in enumerate(dates, start=1):
        text += f"*{i}* - {format_date(day)}\n"
    text += f"\n{CANCEL_HINT}"
    return text


def times_menu(date: str, service: Service, times: Sequence[str]) -> str:
    text = "🕐 *SELECIONE O HORÁRIO*\n\n"
    text += f"📅 {format_date(date)}\n"
    text += f"💇 {service.name} ({service.duration} min)\n\n"
    for i, time in enumerate(times, start=1):
        text += f"*{i}* - {time}\n"
    text += "\nPara trocar a data, digite *data* e o número (ex: data 2)"
    text += f"\n{CANCEL_HINT}"
    return text


def booking_summary(service: Service, date: str, time: str, end_time: str, client_name: str) -> str:
    return (
        "✅ *CONFIRMAR AGENDAMENTO*\n\n"
        f"💇 *Serviço:* {service.name}\n"
        f"📅 *Data:* {format_date(date)}\n"
        f"🕐 *Horário:* {time} às {end_time}\n"
        f"💰 *Valor:* {format_money(service.price)}\n"
        f"👤 *Cliente:* {client_name}\n\n"
        "Digite *confirmar* para confirmar ou *cancelar* para cancelar."
    )


def booking_done(appointment: Appointment) -> str:
    return (
        "🎉 *AGENDAMENTO REALIZADO!*\n\n"
        "Seu horário foi marcado com sucesso!\n\n"
        f"📅 {format_date_time(appointment.date, appointment.time)}\n"
        f"💇 {appointment.service_name}\n"
        f"💰 {format_money(appointment.price)}\n\n"
        "O barbeiro confirmará seu agendamento em breve.\n"
        "Para cancelar, entre em contato pelo WhatsApp.\n\n"
        "Obrigado! 💈"
    )


def new_booking_notification(appointment: Appointment) -> str:
    return (
        "🔔 *NOVO AGENDAMENTO*\n\n"
        f"👤 {appointment.client_name}\n"
        f"💇 {appointment.service_name}\n"
        f"📅 {format_date_time(appointment.date, appointment.time)}\n"
        f"💰 {format_money(appointment.price)}\n\n"
        f"Para confirmar: confirmar {appointment.short_id}"
    )


def _status_marker(appointment: Appointment) -> str:
    return "✅" if appointment.status == AppointmentStatus.CONFIRMED else "⏳"


def customer_appointments(appointments: Sequence[Appointment]) -> str:
    text = "📅 *SEUS AGENDAMENTOS*\n\n"
    for appointment in appointments:
        text += f"{_status_marker(appointment)} *{appointment.service_name}*\n"
        text += f"📆 {format_date_time(appointment.date, appointment.time)}\n"
        text += f"💰 {format_money(appointment.price)}\n\n"
    return text.rstrip()


def appointments_list(title: str, appointments: Sequence[Appointment]) -> str:
    text = f"📅 *{title}*\n\n"
    if not appointments:
        return text + "Nenhum agendamento encontrado."
    for appointment in appointments:
        sid = appointment.short_id
        text += f"{_status_marker(appointment)} *{appointment.service_name}*\n"
        text += f"👤 {appointment.client_name}\n"
        text += f"📆 {format_date_time(appointment.date, appointment.time)}\n"
        text += f"💰 {format_money(appointment.price)}\n"
        text += f"📝 ID: `{sid}`\n"
        text += f"Comandos: confirmar {sid} | cancelar {sid}\n\n"
    return text.rstrip()


def week_agenda(days: Sequence[tuple[str, Sequence[Appointment]]]) -> str:
    text = "📅 *AGENDA DA SEMANA*\n\n"
    sections = []
    for day, appointments in days:
        if not appointments:
            continue
        section = f"📆 *{format_date(day)}*\n"
        for appointment in appointments:
            section += (
                f"{_status_marker(appointment)} {appointment.time} - "
                f"{appointment.client_name} ({appointment.service_name}) `{appointment.short_id}`\n"
            )
        sections.append(section)
    if not sections:
        return text + "Nenhum agendamento esta semana."
    return text + "\n".join(sections).rstrip()


def client_list(clients: Sequence[Client], limit: int = 20) -> str:
    text = f"👥 *CLIENTES CADASTRADOS* ({len(clients)})\n\n"
    for client in clients[:limit]:
        text += f"• {client.name} ({client.phone})\n"
        text += f"  Visitas: {client.total_visits}\n\n"
    if len(clients) > limit:
        text += f"... e mais {len(clients) - limit} clientes"
    return text.rstrip()


def appointment_confirmed_for_customer(appointment: Appointment) -> str:
    return (
        "✅ *Confirmação de Agendamento*\n\n"
        "Seu horário foi confirmado!\n\n"
        f"📅 {format_date_time(appointment.date, appointment.time)}\n"
        f"💇 {appointment.service_name}\n"
        f"💰 {format_money(appointment.price)}\n\n"
        "Nos vemos em breve! 💈"
    )


def appointment_cancelled_for_customer(appointment: Appointment) -> str:
    return (
        "❌ *Agendamento Cancelado*\n\n"
        "Seu horário foi cancelado.\n\n"
        f"📅 {format_date_time(appointment.date, appointment.time)}\n"
        f"💇 {appointment.service_name}\n\n"
        "Para remarcar, digite *agendar*!"
    )


def appointment_not_found(short_ref: str) -> str:
    return f"❌ Agendamento não encontrado: {short_ref}"


def category_menu(record_type: FinancialType, categories: Sequence[str]) -> str:
    if record_type == FinancialType.INCOME:
        text = "💵 *CATEGORIA DE ENTRADA*\n\n"
    else:
        text = "💸 *CATEGORIA DE SAÍDA*\n\n"
    for i, category in enumerate(categories, start=1):
        text += f"*{i}* - {category}\n"
    text += f"\n{CANCEL_HINT}"
    return text


def _type_label(record_type: FinancialType) -> str:
    return "entrada" if record_type == FinancialType.INCOME else "saída"


def _type_emoji(record_type: FinancialType) -> str:
    return "💵" if record_type == FinancialType.INCOME else "💸"


def ask_amount(record_type: FinancialType) -> str:
    return (
        f"💰 *VALOR DA {_type_label(record_type).upper()}*\n\n"
        "Digite o valor (apenas números):\n\nEx: 50,00"
    )


def financial_summary_prompt(
    record_type: FinancialType,
    category: str,
    amount: Decimal,
    description: str,
) -> str:
    text = f"{_type_emoji(record_type)} *CONFIRMAR {_type_label(record_type).upper()}*\n\n"
    text += f"📂 Categoria: {category}\n"
    text += f"💰 Valor: {format_money(amount)}\n"
    if description:
        text += f"📝 Descrição: {description}\n"
    text += "\nDigite *confirmar* para salvar ou *cancelar* para cancelar."
    return text


def financial_saved(record: FinancialRecord) -> str:
    return (
        f"{_type_emoji(record.type)} *{_type_label(record.type).upper()} REGISTRADA!*\n\n"
        f"📂 Categoria: {record.category}\n"
        f"💰 Valor: {format_money(record.amount)}\n\n"
        "Registro salvo com sucesso!"
    )


def _summary_block(title: str, summary: FinancialSummary) -> str:
    return (
        f"📊 *{title}:*\n"
        f"💵 Entradas: {format_money(summary.income)}\n"
        f"💸 Saídas: {format_money(summary.expense)}\n"
        f"📊 Saldo: {format_money(summary.balance)}\n"
    )


def financial_report(
    today: str,
    week: FinancialSummary,
    month: FinancialSummary,
    recent: Sequence[FinancialRecord],
) -> str:
    text = "💰 *RELATÓRIO FINANCEIRO*\n\n"
    text += f"*HOJE:* {format_date(today)}\n\n"
    text += _summary_block("ESTA SEMANA", week) + "\n"
    text += _summary_block("ESTE MÊS", month) + "\n"
    if recent:
        text += "🕐 *ÚLTIMAS TRANSAÇÕES:*\n"
        for record in recent:
            text += (
                f"{_type_emoji(record.type)} {format_date(record.date.date())} - "
                f"{record.category}: {format_money(record.amount)}\n"
            )
    text += "\n📝 *COMANDOS:*\n"
    text += "• *entrada* - Registrar entrada\n"
    text += "• *saída* - Registrar saída\n"
    text += "• *finanças* - Ver este relatório"
    return text


def manager_installed() -> str:
    return (
        "✅ *Grupo de Gerenciamento Configurado!*\n\n"
        "Este grupo agora é o painel de controle da sua barbearia.\n\n"
        + manager_menu()
    )
