from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

advertiser_router = DefaultRouter()
advertiser_router.register(r'billing/invoices', views.AdvertiserInvoiceViewSet, basename='advertiser-invoice')
advertiser_router.register(r'billing/payments', views.AdvertiserPaymentViewSet, basename='advertiser-payment')
advertiser_router.register(r'billing/payment-methods', views.AdvertiserPaymentMethodViewSet,
                           basename='advertiser-payment-method')

partner_router = DefaultRouter()
partner_router.register(r'wallet/transactions', views.WalletTransactionViewSet, basename='partner-transaction')
partner_router.register(r'wallet/payment-methods', views.WalletPaymentMethodViewSet, basename='partner-payment-method')
partner_router.register(r'payouts', views.PayoutHistoryViewSet, basename='partner-payout')

advertiser_urlpatterns = [
    path('', include(advertiser_router.urls)),
]

partner_urlpatterns = [
    path('wallet/', views.partner_wallet, name='partner_wallet'),
    path('wallet/withdraw/', views.withdraw, name='partner_withdraw'),
    path('', include(partner_router.urls)),
]
